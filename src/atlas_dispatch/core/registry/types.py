# src/atlas_dispatch/core/registry/types.py
"""
Tipos canônicos do registry do Atlas Dispatch.

Este módulo define as estruturas imutáveis que descrevem o que pode ser
despachado:

    - EffectDef      → operação com efeito colateral (handler recebe ctx + system)
    - ActionDef      → expansão pura de estado em operações
    - PlaceholderDef → resolução tardia de valores a partir de dispatch-data
    - Interceptor    → hooks de ciclo de vida (before/after de cada fase)

Princípios fundamentais:
    - Definições são imutáveis (frozen) e não conhecem o engine
    - `schema` é uma referência opaca: nunca inspecionada pelo core
    - Metadados extras do usuário são preservados em `meta`

Limites explícitos:
    - Não resolve nem mescla registries (ver `registry.merge`)
    - Não executa handlers
    - Não valida schemas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Mapping, Optional, Tuple

# Nomes canônicos dos hooks, na ordem em que as fases acontecem.
HOOK_NAMES: Tuple[str, ...] = (
    "before_dispatch",
    "after_dispatch",
    "before_action",
    "after_action",
    "before_effect",
    "after_effect",
)


@dataclass(frozen=True)
class EffectDef:
    """
    Definição de um efeito registrado.

    O handler é invocado como `handler(handler_ctx, system, *args)` e pode
    levantar exceções: o executor as converte em ErrorRecord.
    """
    handler: Callable[..., Any]
    description: str = ""
    schema: Any = None
    system_keys: Optional[Tuple[Hashable, ...]] = None
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionDef:
    """Definição de uma ação: `handler(state, *args) -> [operações]` (pura)."""
    handler: Callable[..., Any]
    description: str = ""
    schema: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PlaceholderDef:
    """Definição de um placeholder: `handler(dispatch_data, *args) -> valor`."""
    handler: Callable[..., Any]
    description: str = ""
    schema: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Interceptor:
    """
    Interceptor de ciclo de vida do dispatch.

    Cada hook presente é uma função pura `(ctx) -> ctx`. Hooks `before_*`
    executam em ordem de registro (fila); hooks `after_*` em ordem
    reversa (pilha).

    Invariantes:
        - `id` identifica o interceptor em ErrorRecords de falhas de hook
        - Hooks ausentes (None) são simplesmente ignorados pela cadeia
    """
    id: Hashable
    before_dispatch: Optional[Callable[[Any], Any]] = None
    after_dispatch: Optional[Callable[[Any], Any]] = None
    before_action: Optional[Callable[[Any], Any]] = None
    after_action: Optional[Callable[[Any], Any]] = None
    before_effect: Optional[Callable[[Any], Any]] = None
    after_effect: Optional[Callable[[Any], Any]] = None

    def hook(self, name: str) -> Optional[Callable[[Any], Any]]:
        if name not in HOOK_NAMES:
            raise ValueError(f"Hook desconhecido: {name}")
        return getattr(self, name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Interceptor":
        """Constrói um Interceptor a partir de um mapa `{id, before_dispatch, ...}`.

        Chaves em kebab-case (`before-dispatch`) também são aceitas.
        """
        normalized = {str(k).replace("-", "_"): v for k, v in data.items()}
        unknown = set(normalized) - set(HOOK_NAMES) - {"id"}
        if unknown:
            raise ValueError(f"Chaves desconhecidas em interceptor: {sorted(unknown)}")
        if "id" not in normalized:
            raise ValueError("Interceptor requer `id`")
        return cls(**normalized)
