from django.contrib import admin
from crates.models import Keyword


@admin.register(Keyword)
class KeywordAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'release_count']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
