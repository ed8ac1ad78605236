# src/atlas_dispatch/core/registry/registry.py
"""
Registry mesclado consumido pelo engine do Atlas Dispatch.

Este módulo define o `Registry`, o valor imutável que reúne tudo o que um
dispatch pode resolver: efeitos, ações, placeholders, interceptors e a
função opcional `system_to_state`, além do `system_schema` e de metadados
livres declarados pelo usuário.

Responsabilidades do módulo:
    - Congelar os mapas de definições (somente leitura)
    - Preservar a ordem de registro dos interceptors
    - Rejeitar chaves registradas simultaneamente como efeito e ação
    - Classificar chaves de operação de forma exaustiva (`classify`)

Decisões arquiteturais:
    - A validação ocorre na construção, antes de qualquer dispatch
    - Chaves não-hasheáveis são classificadas como UNKNOWN, nunca levantam

Invariantes:
    - `effects`, `actions` e `placeholders` são mapas somente leitura
    - `interceptors` é uma tupla na ordem de registro
    - `effects` e `actions` são disjuntos

Limites explícitos:
    - Não resolve especificações heterogêneas (ver `merge`)
    - Não executa handlers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from atlas_dispatch.core.pipeline.types import OperationKind

from .errors import RegistryKeyCollisionError
from .types import ActionDef, EffectDef, Interceptor, PlaceholderDef


def _contains(mapping: Mapping[Hashable, Any], key: Any) -> bool:
    try:
        return key in mapping
    except TypeError:
        # chave não-hasheável (ex.: lista) nunca está registrada
        return False


def operation_key(operation: Any) -> Any:
    """Retorna a chave (primeiro elemento) de um vetor de operação, ou None."""
    if isinstance(operation, (list, tuple)) and operation:
        return operation[0]
    return None


@dataclass(frozen=True)
class Registry:
    """
    Registry canônico, já resolvido e mesclado.

    Campos:
        - effects / actions / placeholders: mapas chave → definição
        - interceptors: interceptors na ordem de registro
        - system_to_state: função opcional `(system) -> state`
        - conflicts: chaves sobrescritas durante a mescla (informativo)
        - system_schema: descrição das chaves esperadas no sistema (informativo)
        - meta: chaves de topo não reconhecidas, preservadas como metadados do usuário
    """
    effects: Mapping[Hashable, EffectDef] = field(default_factory=dict)
    actions: Mapping[Hashable, ActionDef] = field(default_factory=dict)
    placeholders: Mapping[Hashable, PlaceholderDef] = field(default_factory=dict)
    interceptors: Tuple[Interceptor, ...] = ()
    system_to_state: Optional[Callable[[Any], Any]] = None
    conflicts: Tuple[Dict[str, Any], ...] = ()
    system_schema: Mapping[Hashable, Any] = field(default_factory=dict)
    meta: Mapping[Hashable, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "effects", MappingProxyType(dict(self.effects)))
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions)))
        object.__setattr__(self, "placeholders", MappingProxyType(dict(self.placeholders)))
        object.__setattr__(self, "interceptors", tuple(self.interceptors))
        object.__setattr__(self, "conflicts", tuple(self.conflicts))
        object.__setattr__(self, "system_schema", MappingProxyType(dict(self.system_schema)))
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

        collisions = [k for k in self.effects if k in self.actions]
        if collisions:
            raise RegistryKeyCollisionError(
                f"Chaves registradas como efeito e ação ao mesmo tempo: {collisions}"
            )

    def classify(self, key: Any) -> OperationKind:
        if _contains(self.effects, key):
            return OperationKind.EFFECT
        if _contains(self.actions, key):
            return OperationKind.ACTION
        return OperationKind.UNKNOWN

    def get_state(self, system: Any) -> Any:
        if self.system_to_state is None:
            return None
        return self.system_to_state(system)

    def keys(self) -> List[Hashable]:
        """Todas as chaves despacháveis ou resolvíveis, na ordem efeitos → ações → placeholders."""
        return [*self.effects, *self.actions, *self.placeholders]
