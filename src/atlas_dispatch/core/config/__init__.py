# src/atlas_dispatch/core/config/__init__.py

"""
Camada de configuração do Atlas Dispatch.

Fluxo: arquivos (defaults ← local) → deep-merge → `DispatchConfig`
(dados, `DispatchSettings` validado, hash canônico, arquivos de origem).

Invariantes:
    - Falhas de configuração são levantadas antes de qualquer dispatch
    - Toda falha informa o arquivo e a chave envolvidos, quando conhecidos
"""
