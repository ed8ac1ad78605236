# src/atlas_dispatch/core/config/loader.py
"""
Carregamento da configuração de um dispatcher.

`load_config` lê um arquivo de defaults (obrigatório) e, opcionalmente, um
arquivo local de overrides, e devolve um `DispatchConfig` pronto para uso:

    config = load_config(defaults_path="config/dispatch.defaults.yaml",
                         local_path="config/dispatch.local.yaml")
    dispatch = create_dispatch([orders_registry], config=config)
    event_log = create_event_log(config=config)

Decisões arquiteturais:
    - A seção `dispatch` é validada no carregamento: um arquivo inválido
      falha aqui, com a origem na mensagem, e não na criação do dispatcher
    - O hash canônico é calculado uma única vez e viaja com a configuração
    - Um arquivo local ausente é ignorado; apenas arquivos lidos entram em `sources`

Limites explícitos:
    - Não observa mudanças nos arquivos (sem reload)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingsError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .merge import deep_merge
from .settings import DispatchSettings


def _read_yaml(fh) -> Any:
    return yaml.safe_load(fh)


def _read_json(fh) -> Any:
    return json.load(fh)


_READERS: Dict[str, Callable[[Any], Any]] = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".json": _read_json,
}


@dataclass(frozen=True)
class DispatchConfig:
    """
    Configuração resolvida de um dispatcher.

    Campos:
        - data: configuração completa após a mescla (inclui seções de outras camadas)
        - settings: seção `dispatch` já validada
        - config_hash: SHA-256 canônico de `data`
        - sources: arquivos efetivamente lidos, na ordem de aplicação
    """
    data: Dict[str, Any] = field(default_factory=dict)
    settings: DispatchSettings = field(default_factory=DispatchSettings)
    config_hash: str = ""
    sources: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, sources: Tuple[str, ...] = ()) -> "DispatchConfig":
        """Valida a seção `dispatch` de um mapa já resolvido e calcula seu hash."""
        resolved = dict(data)
        return cls(
            data=resolved,
            settings=DispatchSettings.from_config(resolved),
            config_hash=compute_config_hash(resolved),
            sources=tuple(sources),
        )


def _read_layer(path: Path) -> Dict[str, Any]:
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedConfigFormatError(
            message=f"Formato não suportado: {path.suffix or '<sem extensão>'}",
            details={"source": str(path)},
            hint="Use .yaml, .yml ou .json.",
        )

    with path.open("r", encoding="utf-8") as fh:
        data = reader(fh)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            message="A raiz do arquivo de configuração deve ser um mapa",
            details={"source": str(path), "received": type(data).__name__},
        )
    return data


def load_config(*, defaults_path: str, local_path: Optional[str] = None) -> DispatchConfig:
    """
    Lê defaults e overrides locais e devolve a configuração do dispatcher.

    Args:
        defaults_path: arquivo base; obrigatório.
        local_path: arquivo de overrides; ignorado quando não existe.

    Raises:
        DefaultsNotFoundError: `defaults_path` não existe.
        UnsupportedConfigFormatError: extensão não suportada.
        InvalidConfigRootTypeError: raiz do arquivo não é um mapa.
        ConfigTypeConflictError: o local troca o tipo de uma chave dos defaults.
        InvalidSettingsError: seção `dispatch` inválida após a mescla.
    """
    defaults = Path(defaults_path)
    if not defaults.exists():
        raise DefaultsNotFoundError(
            message="Arquivo de defaults não encontrado",
            details={"source": str(defaults)},
        )

    data = _read_layer(defaults)
    sources = [str(defaults)]

    if local_path is not None and Path(local_path).exists():
        local = Path(local_path)
        data = deep_merge(data, _read_layer(local), source=str(local))
        sources.append(str(local))

    try:
        return DispatchConfig.from_mapping(data, sources=tuple(sources))
    except InvalidSettingsError as e:
        # o valor inválido vem da última camada que o definiu; informamos todas
        e.details.setdefault("source", " <- ".join(reversed(sources)))
        raise
