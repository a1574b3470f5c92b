"""Tabledash API routes: auth verify, VOD proxy, generic query."""
