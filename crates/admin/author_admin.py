from django.contrib import admin
from crates.models import Author


@admin.register(Author)
class AuthorAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'slug']
    search_fields = ['name', 'email']
    prepopulated_fields = {'slug': ('name',)}
