# src/atlas_dispatch/core/config/settings.py
"""
Parâmetros de execução do dispatcher (seção `dispatch` da configuração).

Exemplo (YAML):

    dispatch:
      max_action_depth: 100
      max_interpolation_depth: 10
      fail_fast: false

Invariantes:
    - Profundidades são inteiros >= 0 (bool não é aceito como inteiro)
    - `fail_fast` é booleano
    - Chaves desconhecidas na seção são rejeitadas
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidSettingsError

SECTION = "dispatch"

DEFAULT_MAX_ACTION_DEPTH = 100
DEFAULT_MAX_INTERPOLATION_DEPTH = 10


def _invalid(name: Optional[str], message: str, value: Any) -> InvalidSettingsError:
    key_path = SECTION if name is None else f"{SECTION}.{name}"
    return InvalidSettingsError(
        message=message,
        details={"key_path": key_path, "received": repr(value)},
    )


def _depth(section: Mapping[str, Any], name: str, default: int) -> int:
    value = section.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise _invalid(name, "Profundidade deve ser inteiro >= 0", value)
    return value


@dataclass(frozen=True)
class DispatchSettings:
    max_action_depth: int = DEFAULT_MAX_ACTION_DEPTH
    max_interpolation_depth: int = DEFAULT_MAX_INTERPOLATION_DEPTH
    fail_fast: bool = False

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "DispatchSettings":
        """
        Constrói os parâmetros a partir da configuração resolvida.

        Ausência da seção `dispatch` (ou `config=None`) resulta nos defaults.

        Raises:
            InvalidSettingsError: Se a seção ou algum valor for inválido.
        """
        section = (config or {}).get(SECTION) or {}
        if not isinstance(section, Mapping):
            raise _invalid(None, "Seção deve ser um mapa", section)

        unknown = sorted(set(section) - {"max_action_depth", "max_interpolation_depth", "fail_fast"})
        if unknown:
            raise _invalid(unknown[0], f"Chaves desconhecidas na seção: {unknown}", section[unknown[0]])

        fail_fast = section.get("fail_fast", False)
        if not isinstance(fail_fast, bool):
            raise _invalid("fail_fast", "Valor deve ser booleano", fail_fast)

        return cls(
            max_action_depth=_depth(section, "max_action_depth", DEFAULT_MAX_ACTION_DEPTH),
            max_interpolation_depth=_depth(
                section, "max_interpolation_depth", DEFAULT_MAX_INTERPOLATION_DEPTH
            ),
            fail_fast=fail_fast,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_action_depth": self.max_action_depth,
            "max_interpolation_depth": self.max_interpolation_depth,
            "fail_fast": self.fail_fast,
        }
