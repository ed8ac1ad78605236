"""
Atlas Dispatch — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Dispatch.
Erros de dispatch são considerados **dados** e fazem parte do contrato
público do engine, devendo ser:

- explícitos
- acumulados (nunca descartados)
- rastreáveis até a fase e a operação que os originou
- serializáveis

O engine nunca levanta exceções para o chamador de `dispatch`: toda falha
é convertida em um `ErrorRecord` e devolvida em `DispatchResult.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Sequence

from .exceptions import (
    DispatchException,
    InvalidOperations,
    MaxDepthExceeded,
    UnknownActionOrEffect,
    UnknownEffect,
)


class ErrorPhase(str, Enum):
    """
    Fases do pipeline de dispatch às quais um erro pode ser atribuído.

    Os valores são strings estáveis, no formato usado em relatórios e
    event logs (`interceptor/<before|after>-<fase>` para hooks).
    """
    EXPAND_ACTION = "expand-action"
    EXECUTE_EFFECT = "execute-effect"
    INTERCEPTOR_BEFORE_DISPATCH = "interceptor/before-dispatch"
    INTERCEPTOR_AFTER_DISPATCH = "interceptor/after-dispatch"
    INTERCEPTOR_BEFORE_ACTION = "interceptor/before-action"
    INTERCEPTOR_AFTER_ACTION = "interceptor/after-action"
    INTERCEPTOR_BEFORE_EFFECT = "interceptor/before-effect"
    INTERCEPTOR_AFTER_EFFECT = "interceptor/after-effect"

    @classmethod
    def for_hook(cls, hook_name: str) -> "ErrorPhase":
        """Mapeia o nome de um hook (ex.: `before_action`) para a fase de erro."""
        return cls("interceptor/" + hook_name.replace("_", "-"))


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

UNKNOWN_EFFECT = "UNKNOWN_EFFECT"
UNKNOWN_ACTION_OR_EFFECT = "UNKNOWN_ACTION_OR_EFFECT"
MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
INVALID_OPERATIONS = "INVALID_OPERATIONS"
HANDLER_EXCEPTION = "HANDLER_EXCEPTION"
INTERCEPTOR_EXCEPTION = "INTERCEPTOR_EXCEPTION"


# ---------------------------------------------------------------------------
# Registro canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorRecord:
    """
    Registro imutável de uma falha ocorrida durante um dispatch.

    Campos:
    - phase: fase do pipeline em que a falha ocorreu (`ErrorPhase`)
    - type: código estável do catálogo (não é texto livre)
    - subject: vetor de operação envolvido (ou None, quando não há um)
    - cause: exceção original (do handler/hook ou tipada pelo engine)
    - interceptor_id: id do interceptor, quando a falha vem de um hook

    Decisões arquiteturais:
        - A exceção original é preservada em `cause` para inspeção programática
        - `to_dict` nunca expõe stack trace, apenas classe, mensagem e details
    """

    phase: ErrorPhase
    type: str
    subject: Any
    cause: BaseException
    interceptor_id: Optional[Hashable] = None

    @property
    def message(self) -> str:
        return str(self.cause) or self.cause.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        cause: Dict[str, Any] = {
            "exception_class": self.cause.__class__.__name__,
            "message": self.message,
        }
        if isinstance(self.cause, DispatchException):
            cause["details"] = dict(self.cause.details)
            cause["hint"] = self.cause.hint
        return {
            "phase": self.phase.value,
            "type": self.type,
            "subject": _subject_to_data(self.subject),
            "interceptor_id": self.interceptor_id,
            "cause": cause,
        }


def _key(operation: Any) -> Any:
    if isinstance(operation, (list, tuple)) and operation:
        return operation[0]
    return None


def _subject_to_data(subject: Any) -> Any:
    if isinstance(subject, (list, tuple)):
        return [_subject_to_data(x) for x in subject]
    return subject


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def unknown_action_or_effect(
    *,
    operation: Sequence[Any],
    available: List[Hashable],
) -> ErrorRecord:
    key = _key(operation)
    return ErrorRecord(
        phase=ErrorPhase.EXPAND_ACTION,
        type=UNKNOWN_ACTION_OR_EFFECT,
        subject=operation,
        cause=UnknownActionOrEffect(
            message="Unknown action or effect",
            details={"key": key, "available": available},
            hint="Registre a chave como efeito ou ação antes de despachá-la.",
        ),
    )


def invalid_operations(*, operations: Any) -> ErrorRecord:
    return ErrorRecord(
        phase=ErrorPhase.EXPAND_ACTION,
        type=INVALID_OPERATIONS,
        subject=None,
        cause=InvalidOperations(
            message="Operations must be a sequence of operation vectors",
            details={"received": type(operations).__name__},
            hint="Passe uma lista de vetores [chave, *args].",
        ),
    )


def unknown_effect(
    *,
    effect: Sequence[Any],
    available: List[Hashable],
) -> ErrorRecord:
    key = _key(effect)
    return ErrorRecord(
        phase=ErrorPhase.EXECUTE_EFFECT,
        type=UNKNOWN_EFFECT,
        subject=effect,
        cause=UnknownEffect(
            message="Unknown effect",
            details={"effect_key": key, "available_effects": available},
        ),
    )


def max_depth_exceeded(*, subject: Any, max_depth: int) -> ErrorRecord:
    return ErrorRecord(
        phase=ErrorPhase.EXPAND_ACTION,
        type=MAX_DEPTH_EXCEEDED,
        subject=subject,
        cause=MaxDepthExceeded(
            message="Max action expansion depth reached",
            details={"max_depth": max_depth},
            hint="Verifique se há ciclos entre ações (ação que expande para si mesma).",
        ),
    )


def handler_exception(
    *,
    phase: ErrorPhase,
    subject: Any,
    exc: BaseException,
) -> ErrorRecord:
    return ErrorRecord(
        phase=phase,
        type=HANDLER_EXCEPTION,
        subject=subject,
        cause=exc,
    )


def interceptor_exception(
    *,
    hook_name: str,
    interceptor_id: Hashable,
    subject: Any,
    exc: BaseException,
) -> ErrorRecord:
    return ErrorRecord(
        phase=ErrorPhase.for_hook(hook_name),
        type=INTERCEPTOR_EXCEPTION,
        subject=subject,
        cause=exc,
        interceptor_id=interceptor_id,
    )
