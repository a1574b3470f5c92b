"""Tabledash Modules - browse and data modules."""
