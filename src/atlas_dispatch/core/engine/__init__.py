# src/atlas_dispatch/core/engine/__init__.py
"""
Engine de dispatch do Atlas Dispatch.

Módulos:
    - placeholders → interpolação recursiva de placeholders
    - interceptors → cadeia before/after e interceptors embutidos
    - actions      → expansão recursiva de ações em efeitos
    - effects      → execução de efeitos e continuação
    - engine       → orquestração das fases de um dispatch
"""
