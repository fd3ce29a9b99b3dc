"""
Relational models for cratesdocs
"""
from .crate import Crate
from .release import Release
from .author import Author, AuthorRel
from .keyword import Keyword, KeywordRel
from .owner import Owner, OwnerRel

__all__ = [
    'Crate',
    'Release',
    'Author',
    'AuthorRel',
    'Keyword',
    'KeywordRel',
    'Owner',
    'OwnerRel',
]
