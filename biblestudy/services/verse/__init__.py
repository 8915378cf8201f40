"""
Verse text lookup.
"""

from .bible_client import BibleApiClient, VerseLookupError

__all__ = ["BibleApiClient", "VerseLookupError"]
