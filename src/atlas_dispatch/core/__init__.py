# src/atlas_dispatch/core/__init__.py
"""
Core do Atlas Dispatch.

Implementação canônica do pipeline de dispatch, independente de adapters:

    - registry     → definições de efeitos, ações, placeholders e interceptors
    - pipeline     → contextos threaded entre fases e tipos de resultado
    - engine       → interpolação, interceptors, expansão, execução e orquestração
    - config       → resolução de configuração e parâmetros de dispatch
    - traceability → Event Log estruturado de dispatches

Princípios fundamentais:
    - Falhas de dispatch são dados (ErrorRecord), nunca exceções ao chamador
    - Contextos são valores imutáveis derivados fase a fase
    - Toda recursão é limitada por contadores explícitos de profundidade
"""
