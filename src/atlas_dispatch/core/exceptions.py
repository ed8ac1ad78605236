"""
Atlas Dispatch — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas Dispatch.

Objetivo:
- Representar, de forma tipada, as causas de falhas detectadas pelo próprio engine
  (chave desconhecida, profundidade máxima, retorno inválido de handler/hook)
- Facilitar o mapeamento determinístico para ErrorRecord
- Evitar ValueError/RuntimeError genéricos como `cause` de erros do engine

Regras:
- Estas exceções são **dados**: o engine as instancia e as anexa a um
  ErrorRecord; elas nunca atravessam a fronteira de `dispatch`.
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class DispatchException(Exception):
    """Base class para exceções internas do Atlas Dispatch.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Expansão / classificação de operações
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InvalidOperations(DispatchException):
    """Argumento de operações do dispatch não é uma sequência de vetores."""


@dataclass(eq=False)
class UnknownActionOrEffect(DispatchException):
    """Chave da operação não está registrada como efeito nem como ação."""


@dataclass(eq=False)
class MaxDepthExceeded(DispatchException):
    """Expansão recursiva de ações atingiu a profundidade máxima."""


@dataclass(eq=False)
class InvalidActionExpansion(DispatchException):
    """Handler de ação retornou algo que não é uma sequência de operações."""


# ---------------------------------------------------------------------------
# Execução de efeitos
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnknownEffect(DispatchException):
    """Efeito chegou ao executor sem registro correspondente."""


# ---------------------------------------------------------------------------
# Interceptors
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InvalidInterceptorResult(DispatchException):
    """Hook de interceptor retornou um valor que não é um contexto."""
