# src/atlas_dispatch/core/registry/merge.py
"""
Resolução e mescla canônica de registries.

Este módulo transforma especificações heterogêneas de registry em um único
`Registry` mesclado, pronto para ser consumido pelo engine.

Especificações aceitas (`resolve_registry`):
    - Registry         → retornado como está
    - mapa (dict)      → convertido via `registry_from_mapping`
    - função sem args  → chamada; o retorno é resolvido novamente
    - `[produtor, *args]` (lista/tupla) → `produtor(*args)`, resolvido novamente

Política de mescla (v1), aplicada da esquerda para a direita:
    - effects / actions / placeholders → merge raso, último vence
    - interceptors                     → concatenação
    - system_to_state                  → substituição (último definido vence)
    - system_schema                    → merge raso, último vence
    - demais chaves de topo            → metadados do usuário, último vence

Decisões arquiteturais:
    - Sobrescritas de chave não são erro: são registradas em `Registry.conflicts`
    - Chaves de topo não reconhecidas não são erro: vão para `Registry.meta`
    - A colisão efeito/ação é validada apenas no Registry final

Limites explícitos:
    - Não valida schemas
    - Não executa handlers
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from .errors import InvalidRegistrySpecError
from .registry import Registry
from .types import ActionDef, EffectDef, Interceptor, PlaceholderDef

D = TypeVar("D", EffectDef, ActionDef, PlaceholderDef)

REGISTRY_KEYS = frozenset(
    {"effects", "actions", "placeholders", "interceptors", "system_to_state", "system_schema"}
)

RegistrySpec = Union[Registry, Mapping[str, Any], Callable[[], Any], list, tuple]


def _to_def(cls: Type[D], key: Hashable, value: Any) -> D:
    if isinstance(value, cls):
        return value
    if not isinstance(value, Mapping):
        raise InvalidRegistrySpecError(
            f"Definição inválida para '{key}': esperado {cls.__name__} ou mapa, "
            f"recebido {type(value).__name__}"
        )

    data = {str(k).replace("-", "_"): v for k, v in value.items()}
    handler = data.pop("handler", None)
    if not callable(handler):
        raise InvalidRegistrySpecError(f"Definição '{key}' requer `handler` chamável")

    kwargs: Dict[str, Any] = {
        "handler": handler,
        "description": data.pop("description", "") or "",
        "schema": data.pop("schema", None),
    }
    if cls is EffectDef:
        system_keys = data.pop("system_keys", None)
        kwargs["system_keys"] = tuple(system_keys) if system_keys is not None else None
    # demais chaves são metadados do usuário
    kwargs["meta"] = dict(data)
    return cls(**kwargs)


def _to_interceptor(value: Any) -> Interceptor:
    if isinstance(value, Interceptor):
        return value
    if isinstance(value, Mapping):
        try:
            return Interceptor.from_mapping(value)
        except (TypeError, ValueError) as e:
            raise InvalidRegistrySpecError(f"Interceptor inválido: {e}") from e
    raise InvalidRegistrySpecError(
        f"Interceptor inválido: esperado Interceptor ou mapa, recebido {type(value).__name__}"
    )


def _defs(cls: Type[D], section: str, data: Mapping[str, Any]) -> Dict[Hashable, D]:
    raw = data.get(section) or {}
    if not isinstance(raw, Mapping):
        raise InvalidRegistrySpecError(f"Seção '{section}' deve ser um mapa")
    return {k: _to_def(cls, k, v) for k, v in raw.items()}


def registry_from_mapping(data: Mapping[str, Any]) -> Registry:
    """
    Converte um mapa de registry em um `Registry`.

    Chaves reconhecidas: `effects`, `actions`, `placeholders`, `interceptors`,
    `system_to_state`, `system_schema` (kebab-case também é aceito). As demais
    são preservadas, com a grafia original, em `Registry.meta`.

    Raises:
        InvalidRegistrySpecError: seção ou definição inválida.
        RegistryKeyCollisionError: chave registrada como efeito e ação.
    """
    normalized: Dict[str, Any] = {}
    meta: Dict[Hashable, Any] = {}
    for k, v in data.items():
        name = str(k).replace("-", "_")
        if name in REGISTRY_KEYS:
            normalized[name] = v
        else:
            meta[k] = v

    system_to_state = normalized.get("system_to_state")
    if system_to_state is not None and not callable(system_to_state):
        raise InvalidRegistrySpecError("`system_to_state` deve ser chamável")

    system_schema = normalized.get("system_schema") or {}
    if not isinstance(system_schema, Mapping):
        raise InvalidRegistrySpecError("`system_schema` deve ser um mapa")

    return Registry(
        effects=_defs(EffectDef, "effects", normalized),
        actions=_defs(ActionDef, "actions", normalized),
        placeholders=_defs(PlaceholderDef, "placeholders", normalized),
        interceptors=tuple(_to_interceptor(i) for i in (normalized.get("interceptors") or [])),
        system_to_state=system_to_state,
        system_schema=system_schema,
        meta=meta,
    )


def resolve_registry(spec: RegistrySpec) -> Registry:
    """
    Resolve uma especificação de registry em um `Registry`.

    Raises:
        InvalidRegistrySpecError: se a especificação não tiver formato suportado.
    """
    if isinstance(spec, Registry):
        return spec
    if isinstance(spec, Mapping):
        return registry_from_mapping(spec)
    if isinstance(spec, (list, tuple)):
        if not spec or not callable(spec[0]):
            raise InvalidRegistrySpecError("Especificação em lista requer [produtor, *args]")
        producer, *args = spec
        return _resolve_produced(producer(*args))
    if callable(spec):
        return _resolve_produced(spec())
    raise InvalidRegistrySpecError(f"Especificação de registry inválida: {spec!r}")


def _resolve_produced(produced: Any) -> Registry:
    if isinstance(produced, (Registry, Mapping)):
        return resolve_registry(produced)
    raise InvalidRegistrySpecError(
        f"Produtor de registry deve retornar Registry ou mapa, recebido {type(produced).__name__}"
    )


def _conflicts(kind: str, existing: Mapping[Hashable, Any], incoming: Mapping[Hashable, Any]) -> List[Dict[str, Any]]:
    return [{"type": kind, "key": k} for k in incoming if k in existing]


def merge_registries(specs: Iterable[RegistrySpec]) -> Registry:
    """
    Resolve e mescla uma sequência de especificações em um único `Registry`.

    A mescla é da esquerda para a direita; sobrescritas são registradas em
    `Registry.conflicts` como `{"type": "effect"|"action"|"placeholder", "key": k}`.

    Raises:
        InvalidRegistrySpecError: especificação inválida.
        RegistryKeyCollisionError: o registry final teria uma chave como efeito e ação.
    """
    effects: Dict[Hashable, EffectDef] = {}
    actions: Dict[Hashable, ActionDef] = {}
    placeholders: Dict[Hashable, PlaceholderDef] = {}
    interceptors: List[Interceptor] = []
    system_to_state: Optional[Callable[[Any], Any]] = None
    conflicts: List[Dict[str, Any]] = []
    system_schema: Dict[Hashable, Any] = {}
    meta: Dict[Hashable, Any] = {}

    for spec in specs:
        registry = resolve_registry(spec)

        conflicts.extend(_conflicts("effect", effects, registry.effects))
        conflicts.extend(_conflicts("action", actions, registry.actions))
        conflicts.extend(_conflicts("placeholder", placeholders, registry.placeholders))
        conflicts.extend(registry.conflicts)

        effects.update(registry.effects)
        actions.update(registry.actions)
        placeholders.update(registry.placeholders)
        interceptors.extend(registry.interceptors)
        if registry.system_to_state is not None:
            system_to_state = registry.system_to_state
        system_schema.update(registry.system_schema)
        meta.update(registry.meta)

    return Registry(
        effects=effects,
        actions=actions,
        placeholders=placeholders,
        interceptors=tuple(interceptors),
        system_to_state=system_to_state,
        conflicts=tuple(conflicts),
        system_schema=system_schema,
        meta=meta,
    )
