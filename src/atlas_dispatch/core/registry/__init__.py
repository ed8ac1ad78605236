# src/atlas_dispatch/core/registry/__init__.py
"""
Registry do Atlas Dispatch: definições imutáveis, classificação de chaves,
resolução de especificações e mescla de múltiplos registries.
"""
