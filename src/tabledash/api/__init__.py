"""Tabledash API - HTTP routes outside the module routers."""
