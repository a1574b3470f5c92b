"""Tabledash - configuration-driven browse/admin API over a Supabase project."""

__version__ = "0.1.0"
