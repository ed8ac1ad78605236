# src/atlas_dispatch/core/config/merge.py
"""
Mescla de camadas de configuração (defaults ← local).

Regras, aplicadas chave a chave da camada de override sobre a base:
    - mapa sobre mapa      → mescla recursiva
    - lista                → substitui a lista inteira
    - base None            → aceita qualquer valor
    - mesmo tipo           → substitui
    - tipos diferentes     → ConfigTypeConflictError com o caminho da chave

Nenhuma das entradas é mutada; o resultado é sempre um `dict` novo.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigTypeConflictError


def _dotted(path: Tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"


def _merge_value(base: Any, override: Any, path: Tuple[str, ...], source: Optional[str]) -> Any:
    if isinstance(base, Mapping) and isinstance(override, Mapping):
        merged = {k: deepcopy(v) for k, v in base.items()}
        for key, value in override.items():
            child = path + (str(key),)
            merged[key] = _merge_value(merged[key], value, child, source) if key in merged else deepcopy(value)
        return merged

    if base is None or isinstance(override, list) or type(base) is type(override):
        return deepcopy(override)

    raise ConfigTypeConflictError(
        message="Override troca o tipo de uma chave de configuração",
        details={
            "source": source,
            "key_path": _dotted(path),
            "expected": type(base).__name__,
            "received": type(override).__name__,
        },
        hint="Mantenha no arquivo local o mesmo tipo declarado nos defaults.",
    )


def deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e devolve a configuração resultante.

    Args:
        source: arquivo de onde veio `override`, usado nas mensagens de erro.

    Raises:
        ConfigTypeConflictError: conflito de tipo (inclusive na raiz).
    """
    if not isinstance(base, Mapping) or not isinstance(override, Mapping):
        raise ConfigTypeConflictError(
            message="Camadas de configuração devem ser mapas",
            details={
                "source": source,
                "key_path": "<root>",
                "expected": "dict",
                "received": type(override if isinstance(base, Mapping) else base).__name__,
            },
        )
    return _merge_value(base, override, (), source)
