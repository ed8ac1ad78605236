# src/atlas_dispatch/core/pipeline/context.py
"""
Contexto de execução de um dispatch.

Este módulo define o `DispatchContext`, a estrutura canônica threaded
através de todas as fases de um dispatch, e seus contextos de fase:

    - DispatchContext → fases de dispatch (before/after-dispatch, interpolação)
    - ActionContext   → expansão de uma ação (acrescenta `action`)
    - EffectContext   → execução de um efeito (acrescenta `effect` e `result`)
    - HandlerContext  → visão restrita entregue aos handlers de efeito

Princípios fundamentais:
    - O contexto é um valor: cada fase consome um contexto e produz outro
    - Derivação sempre via `dataclasses.replace` (instâncias são frozen)
    - Contextos de fase são criados na entrada da fase e reabsorvidos na saída
    - Nenhum estado sobrevive entre dispatches

Invariantes:
    - `results` e `errors` apenas crescem dentro de um dispatch
    - `halted` é o único sinal de interrupção antecipada entre fases
    - Contextos de fase são superconjuntos estritos do DispatchContext

Limites explícitos:
    - Não executa handlers nem interceptors
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from atlas_dispatch.core.errors import ErrorRecord
from .types import EffectResult

C = TypeVar("C", bound="DispatchContext")


@dataclass(frozen=True)
class DispatchContext:
    """
    Contexto imutável de um dispatch.

    Campos:
        - system: sistema vivo (conexões, clientes) entregue a efeitos
        - state: estado imutável derivado via `registry.system_to_state`
        - dispatch_data: dados disponíveis a placeholders e handlers
        - actions: lista pendente de operações (ou produzida, na fase de ação)
        - results: efeitos executados com sucesso, em ordem
        - errors: ErrorRecords acumulados, em ordem
        - dispatch: função de continuação (presente na fase de efeitos)
        - halted: sinal cooperativo de interrupção, setado por interceptors
    """
    system: Any = None
    state: Any = None
    dispatch_data: Mapping[str, Any] = field(default_factory=dict)
    actions: Tuple[Any, ...] = ()
    results: Tuple[EffectResult, ...] = ()
    errors: Tuple[ErrorRecord, ...] = ()
    dispatch: Optional[Callable[..., Any]] = None
    halted: bool = False

    # -----------------------------
    # Derivação
    # -----------------------------
    def with_error(self: C, error: ErrorRecord) -> C:
        return replace(self, errors=self.errors + (error,))

    def with_result(self: C, result: EffectResult) -> C:
        return replace(self, results=self.results + (result,))

    def halt(self: C) -> C:
        return replace(self, halted=True)

    # -----------------------------
    # Fronteiras de fase
    # -----------------------------
    def _base_fields(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(DispatchContext)}

    def action_context(self, action: Any) -> "ActionContext":
        base = self._base_fields()
        base["actions"] = ()
        return ActionContext(**base, action=action)

    def effect_context(self, effect: Any) -> "EffectContext":
        base = self._base_fields()
        base["actions"] = ()
        return EffectContext(**base, effect=effect)

    def absorb(self, phase_ctx: "DispatchContext") -> "DispatchContext":
        """Reincorpora ao contexto de dispatch o que uma fase produziu.

        Apenas `results`, `errors` e `halted` atravessam a fronteira de volta;
        campos transitórios (`action`, `effect`, `result`) são descartados.
        """
        return replace(
            self,
            results=phase_ctx.results,
            errors=phase_ctx.errors,
            halted=phase_ctx.halted,
        )


@dataclass(frozen=True)
class ActionContext(DispatchContext):
    """Contexto da expansão de uma única ação; `actions` guarda o que ela produziu."""
    action: Any = None


@dataclass(frozen=True)
class EffectContext(DispatchContext):
    """Contexto da execução de um único efeito; `result` é preenchido após sucesso."""
    effect: Any = None
    result: Optional[EffectResult] = None


@dataclass(frozen=True)
class HandlerContext:
    """
    Visão entregue a handlers de efeito.

    Expõe apenas a função de continuação, o dispatch-data capturado no
    início do lote de efeitos e o sistema.
    """
    dispatch: Callable[..., Any]
    dispatch_data: Mapping[str, Any]
    system: Any
