"""
Tabledash Data Module

Generic create/read/update/delete over any table, authorized by the
caller's Supabase secret key.
"""

from .service import DataService, strip_empty_fields

__all__ = [
    "DataService",
    "strip_empty_fields",
]
