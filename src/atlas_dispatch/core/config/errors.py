# src/atlas_dispatch/core/config/errors.py
"""
Exceções da camada de configuração do Atlas Dispatch.

Falhas de configuração acontecem na construção de um dispatcher (antes de
qualquer dispatch) e, ao contrário dos erros de dispatch, são levantadas.
Cada exceção carrega dados estruturados para que a mensagem aponte
exatamente o arquivo e a chave responsáveis:

    - details["source"]   → arquivo de origem, quando conhecido
    - details["key_path"] → caminho pontilhado da chave (ex.: `dispatch.fail_fast`)

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - `str(exc)` inclui origem e chave quando presentes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class ConfigError(Exception):
    """Base das falhas de configuração de um dispatcher."""

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    @property
    def source(self) -> Optional[str]:
        return self.details.get("source")

    @property
    def key_path(self) -> Optional[str]:
        return self.details.get("key_path")

    def __str__(self) -> str:
        where = [f"{k}={self.details[k]}" for k in ("source", "key_path") if self.details.get(k)]
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message


@dataclass(eq=False)
class DefaultsNotFoundError(ConfigError):
    """O arquivo de defaults informado não existe."""


@dataclass(eq=False)
class UnsupportedConfigFormatError(ConfigError):
    """Extensão fora de `.yaml`, `.yml` e `.json`."""


@dataclass(eq=False)
class InvalidConfigRootTypeError(ConfigError):
    """A raiz do arquivo não é um mapa."""


@dataclass(eq=False)
class ConfigTypeConflictError(ConfigError):
    """
    Um override troca o tipo de uma chave já definida.

    Exemplo:
        - defaults: {"dispatch": {"fail_fast": true}}
        - local:    {"dispatch": "strict"}   → key_path = "dispatch"
    """


@dataclass(eq=False)
class InvalidSettingsError(ConfigError):
    """
    A seção `dispatch` contém valores inválidos.

    Exemplos:
        - `max_action_depth` negativo ou não inteiro
        - `fail_fast` não booleano
        - chave desconhecida na seção
    """
