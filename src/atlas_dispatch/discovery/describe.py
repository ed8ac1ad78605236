# src/atlas_dispatch/discovery/describe.py
"""
Descoberta (introspecção) de um dispatcher do Atlas Dispatch.

Funções somente leitura sobre o registry mesclado:

    - describe(target)                 → todos os itens
    - describe(target, "effects")      → apenas efeitos ("actions", "placeholders")
    - describe(target, key)            → um item específico (ou None)
    - grep(target, pattern)            → itens cuja chave ou descrição casam
    - schemas(target)                  → mapa chave → schema declarado

Cada item descrito é um dict com `key`, `type` ("effect" | "action" |
"placeholder"), `description`, `schema`, `system_keys` (apenas efeitos que
os declaram) e os metadados do usuário (`meta`).

Limites explícitos:
    - Não valida schemas nem gera amostras a partir deles
"""

from __future__ import annotations

import re
from typing import Any, Dict, Hashable, Iterator, List, Optional, Pattern, Union

from atlas_dispatch.core.registry.registry import Registry
from atlas_dispatch.core.registry.types import EffectDef

SECTIONS = {
    "effects": "effect",
    "actions": "action",
    "placeholders": "placeholder",
}


def _registry(target: Any) -> Registry:
    if isinstance(target, Registry):
        return target
    registry = getattr(target, "registry", None)
    if isinstance(registry, Registry):
        return registry
    raise TypeError(f"Esperado Dispatch ou Registry, recebido {type(target).__name__}")


def _describe_item(item_type: str, key: Hashable, definition: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "key": key,
        "type": item_type,
        "description": definition.description or "",
        "schema": definition.schema,
    }
    if isinstance(definition, EffectDef) and definition.system_keys is not None:
        out["system_keys"] = list(definition.system_keys)
    # metadados do usuário nunca sobrescrevem os campos canônicos
    for k, v in definition.meta.items():
        out.setdefault(k, v)
    return out


def _section(registry: Registry, section: str) -> Iterator[Dict[str, Any]]:
    item_type = SECTIONS[section]
    for key, definition in getattr(registry, section).items():
        yield _describe_item(item_type, key, definition)


def _all(registry: Registry) -> List[Dict[str, Any]]:
    return [item for section in SECTIONS for item in _section(registry, section)]


def describe(target: Any, key_or_type: Optional[Hashable] = None) -> Union[List[Dict[str, Any]], Dict[str, Any], None]:
    """
    Descreve os itens registrados em um dispatcher (ou registry).

    Args:
        target: `Dispatch` ou `Registry`.
        key_or_type: None/"all" para todos os itens; "effects", "actions" ou
            "placeholders" para uma seção; qualquer outro valor é tratado
            como chave de um item.

    Returns:
        Lista de descrições, a descrição de um único item, ou None se a
        chave não estiver registrada.
    """
    registry = _registry(target)

    if key_or_type is None or key_or_type == "all":
        return _all(registry)
    if isinstance(key_or_type, str) and key_or_type in SECTIONS:
        return list(_section(registry, key_or_type))

    for section, item_type in SECTIONS.items():
        definitions = getattr(registry, section)
        try:
            definition = definitions.get(key_or_type)
        except TypeError:
            return None
        if definition is not None:
            return _describe_item(item_type, key_or_type, definition)
    return None


def grep(target: Any, pattern: Union[str, Pattern[str]]) -> List[Dict[str, Any]]:
    """
    Busca itens cuja chave (`str(key)`) ou descrição casam com `pattern`.

    Strings são tratadas como literal, sem diferenciar maiúsculas; um
    `re.Pattern` compilado é usado como está.
    """
    if not isinstance(pattern, re.Pattern):
        pattern = re.compile(re.escape(str(pattern)), re.IGNORECASE)

    return [
        item
        for item in _all(_registry(target))
        if pattern.search(str(item["key"])) or pattern.search(str(item["description"]))
    ]


def schemas(target: Any) -> Dict[Hashable, Any]:
    """Retorna `{chave: schema}` para todos os itens que declaram schema."""
    registry = _registry(target)
    out: Dict[Hashable, Any] = {}
    for section in SECTIONS:
        for key, definition in getattr(registry, section).items():
            if definition.schema is not None:
                out[key] = definition.schema
    return out
