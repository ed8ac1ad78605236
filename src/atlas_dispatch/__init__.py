# src/atlas_dispatch/__init__.py
"""
Atlas Dispatch — engine de dispatch de efeitos em processo.

Dado um registry de efeitos (operações com efeito colateral), ações
(expansões puras de estado em operações), placeholders (valores resolvidos
tardiamente) e interceptors (hooks de ciclo de vida), o engine transforma
uma lista declarativa de vetores `[chave, *args]` em efeitos executados,
coletando resultados e erros sem nunca levantar exceções para o chamador.

Arquitetura em alto nível:
    - core.registry     → definições, Registry imutável, resolução e mescla
    - core.pipeline     → contextos de fase e tipos de resultado
    - core.engine       → placeholders, interceptors, ações, efeitos, orquestrador
    - core.config       → carregamento, merge, hashing e parâmetros de dispatch
    - core.traceability → Event Log e interceptor de rastreamento
    - discovery         → describe / grep / schemas

Limites explícitos:
    - Não é um broker de mensagens nem um agendador distribuído
    - Não valida schemas (são referências opacas)
"""

from .core.config.loader import DispatchConfig, load_config
from .core.config.settings import DispatchSettings
from .core.engine.interceptors import fail_fast
from .core.errors import ErrorPhase, ErrorRecord
from .core.pipeline.types import DispatchResult, EffectResult
from .core.registry.merge import merge_registries, resolve_registry
from .core.registry.registry import Registry
from .core.registry.types import ActionDef, EffectDef, Interceptor, PlaceholderDef
from .core.traceability.event_log import DispatchEventLog, create_event_log, tracing_interceptor
from .discovery.describe import describe, grep, schemas
from .dispatch import Dispatch, create_dispatch

__all__ = [
    "ActionDef",
    "Dispatch",
    "DispatchConfig",
    "DispatchEventLog",
    "DispatchResult",
    "DispatchSettings",
    "EffectDef",
    "EffectResult",
    "ErrorPhase",
    "ErrorRecord",
    "Interceptor",
    "PlaceholderDef",
    "Registry",
    "create_dispatch",
    "create_event_log",
    "describe",
    "fail_fast",
    "grep",
    "load_config",
    "merge_registries",
    "resolve_registry",
    "schemas",
    "tracing_interceptor",
]
