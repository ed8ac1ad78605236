# src/atlas_dispatch/discovery/__init__.py
"""
Introspecção somente leitura de dispatchers: describe, grep e schemas.
"""
