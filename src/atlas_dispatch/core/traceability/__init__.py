# src/atlas_dispatch/core/traceability/__init__.py
"""
Rastreabilidade do Atlas Dispatch (Event Log e interceptor de rastreamento).
"""
