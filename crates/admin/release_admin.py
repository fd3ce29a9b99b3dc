from django.contrib import admin
from crates.models import AuthorRel, KeywordRel, Release


class KeywordRelInline(admin.TabularInline):
    model = KeywordRel
    extra = 0
    raw_id_fields = ['keyword']


class AuthorRelInline(admin.TabularInline):
    model = AuthorRel
    extra = 0
    raw_id_fields = ['author']


@admin.register(Release)
class ReleaseAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'version', 'release_time', 'build_status', 'rustdoc_status',
                    'yanked', 'downloads']
    list_filter = ['build_status', 'rustdoc_status', 'yanked', 'have_examples']
    search_fields = ['crate__name', 'version', 'description']
    raw_id_fields = ['crate']
    inlines = [KeywordRelInline, AuthorRelInline]

    fieldsets = [
        ('Release', {
            'fields': ['crate', 'version', 'release_time', 'yanked', 'downloads']
        }),
        ('Build', {
            'fields': ['build_status', 'rustdoc_status', 'test_status']
        }),
        ('Manifest', {
            'fields': ['license', 'repository_url', 'homepage_url', 'description',
                       'authors', 'keywords', 'dependencies', 'have_examples']
        }),
        ('Documentation', {
            'fields': ['description_long', 'readme'],
            'classes': ['collapse']
        }),
    ]
