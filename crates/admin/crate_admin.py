from django.contrib import admin
from crates.models import Crate, OwnerRel, Release


class ReleaseInline(admin.TabularInline):
    """Inline display of releases for a crate"""
    model = Release
    extra = 0
    fields = ['version', 'release_time', 'yanked', 'build_status', 'rustdoc_status']
    readonly_fields = ['release_time', 'yanked', 'build_status', 'rustdoc_status']
    show_change_link = True


class OwnerInline(admin.TabularInline):
    model = OwnerRel
    extra = 0
    fields = ['owner']
    raw_id_fields = ['owner']


@admin.register(Crate)
class CrateAdmin(admin.ModelAdmin):
    list_display = ['name', 'version_count', 'latest_version', 'updated_at']
    search_fields = ['name']
    readonly_fields = ['versions', 'created_at', 'updated_at']
    inlines = [ReleaseInline, OwnerInline]

    def version_count(self, obj):
        return len(obj.versions)
    version_count.short_description = 'Versions'

    def latest_version(self, obj):
        release = obj.latest_release()
        return release.version if release else '-'
    latest_version.short_description = 'Latest'
