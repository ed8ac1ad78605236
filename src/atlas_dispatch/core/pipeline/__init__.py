# src/atlas_dispatch/core/pipeline/__init__.py
"""
Contextos e tipos de resultado threaded entre as fases de um dispatch.
"""
