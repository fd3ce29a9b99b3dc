"""
Django admin configuration for cratesdocs
"""
from .crate_admin import CrateAdmin
from .release_admin import ReleaseAdmin
from .keyword_admin import KeywordAdmin
from .author_admin import AuthorAdmin
from .owner_admin import OwnerAdmin

__all__ = [
    'CrateAdmin',
    'ReleaseAdmin',
    'KeywordAdmin',
    'AuthorAdmin',
    'OwnerAdmin',
]
