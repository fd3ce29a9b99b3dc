from django.contrib import admin
from crates.models import Owner


@admin.register(Owner)
class OwnerAdmin(admin.ModelAdmin):
    list_display = ['login', 'name', 'email', 'crate_count']
    search_fields = ['login', 'name', 'email']

    def crate_count(self, obj):
        return obj.crates.count()
    crate_count.short_description = 'Crates'
