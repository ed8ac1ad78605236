# src/atlas_dispatch/core/pipeline/types.py
"""
Tipos canônicos do pipeline de dispatch do Atlas Dispatch.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre o engine, os interceptors e o chamador.

Componentes principais:
    - OperationKind  → classificação de uma chave (EFFECT, ACTION, UNKNOWN)
    - EffectResult   → resultado imutável da execução de um efeito
    - DispatchResult → resultado agregado de um dispatch (results + errors)
    - Outcome        → retorno interno no estilo Result (valor ou ErrorRecord)

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa handlers
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from atlas_dispatch.core.errors import ErrorRecord

T = TypeVar("T")


class OperationKind(str, Enum):
    """
    Classificação de uma operação pela presença de sua chave no registry.

    A classificação é exaustiva: toda chave é exatamente um destes valores.
    O expander decide o que fazer com cada operação a partir deste enum,
    nunca por verificações espalhadas de pertinência.
    """
    EFFECT = "effect"
    ACTION = "action"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EffectResult:
    """Resultado da execução bem-sucedida de um efeito: o vetor e o valor retornado."""
    effect: Any
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        effect = list(self.effect) if isinstance(self.effect, (list, tuple)) else self.effect
        return {"effect": effect, "value": self.value}


@dataclass(frozen=True)
class DispatchResult:
    """
    Resultado agregado de um dispatch.

    Campos:
        - results: efeitos executados com sucesso, em ordem de execução
        - errors: todas as falhas acumuladas, em ordem de ocorrência

    Invariantes:
        - Resultados parciais podem coexistir com erros
        - O chamador deve sempre inspecionar `errors`
    """
    results: Tuple[EffectResult, ...] = field(default_factory=tuple)
    errors: Tuple[ErrorRecord, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Retorno interno de expansão/execução: ou um valor, ou um ErrorRecord.

    Handlers levantam exceções; o engine as captura na fronteira da chamada
    e as transforma em `Outcome.failure`, preservando o contrato de que
    `dispatch` nunca levanta.
    """
    value: Optional[T] = None
    error: Optional[ErrorRecord] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorRecord) -> "Outcome[T]":
        return cls(error=error)

    @property
    def failed(self) -> bool:
        return self.error is not None
