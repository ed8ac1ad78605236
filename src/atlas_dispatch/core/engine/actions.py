# src/atlas_dispatch/core/engine/actions.py
"""
Expansão de ações do Atlas Dispatch.

Ações são funções puras `(state, *args) -> [operações]`. Este módulo expande
recursivamente uma lista de operações até restarem apenas efeitos.

Para cada operação, em ordem:
    - EFFECT  → mantida como está
    - ACTION  → expandida (envolta pelos hooks before/after-action); a lista
                produzida é re-interpolada com o dispatch-data corrente e
                expandida recursivamente com profundidade - 1
    - UNKNOWN → ErrorRecord `expand-action` e segue para a próxima

Decisões arquiteturais:
    - A re-interpolação após cada rodada é obrigatória: uma ação pode
      introduzir placeholders ausentes da entrada original
    - A recursão é limitada por `max_depth` (padrão 100); em zero, um único
      erro MAX_DEPTH_EXCEEDED é registrado e o nível retorna vazio
    - Falhas de handler viram `Outcome.failure`, convertidas em ErrorRecord
      na fronteira da chamada
    - `halted` em um hook de ação pula apenas a expansão daquela ação; o
      after-action executa e as operações irmãs seguem normalmente

Invariantes:
    - A expansão sempre termina, mesmo com grafos cíclicos de ações
    - A ordem relativa das operações é preservada no resultado achatado
    - Uma operação com falha nunca aborta as demais do lote

Limites explícitos:
    - Não executa efeitos
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from atlas_dispatch.core.errors import (
    ErrorPhase,
    handler_exception,
    max_depth_exceeded,
    unknown_action_or_effect,
)
from atlas_dispatch.core.exceptions import InvalidActionExpansion
from atlas_dispatch.core.pipeline.context import ActionContext, DispatchContext
from atlas_dispatch.core.pipeline.types import OperationKind, Outcome
from atlas_dispatch.core.registry.registry import Registry, operation_key

from .interceptors import wrap_phase
from .placeholders import DEFAULT_MAX_DEPTH as DEFAULT_INTERPOLATION_DEPTH
from .placeholders import interpolate

DEFAULT_MAX_DEPTH = 100


def interpolate_operations(
    registry: Registry,
    ctx: DispatchContext,
    operations: Sequence[Any],
    max_depth: int = DEFAULT_INTERPOLATION_DEPTH,
    *,
    subject: Optional[Any] = None,
) -> Tuple[List[Any], DispatchContext]:
    """
    Interpola placeholders operação a operação, isolando falhas.

    Uma operação cujo placeholder levanta exceção é descartada e vira um
    ErrorRecord `expand-action` (HANDLER_EXCEPTION); as demais seguem.

    Args:
        subject: sujeito do erro; por padrão, a própria operação que falhou.
    """
    if not registry.placeholders:
        return list(operations), ctx

    out: List[Any] = []
    for operation in operations:
        try:
            out.append(interpolate(registry.placeholders, ctx.dispatch_data, operation, max_depth))
        except Exception as e:
            ctx = ctx.with_error(
                handler_exception(
                    phase=ErrorPhase.EXPAND_ACTION,
                    subject=operation if subject is None else subject,
                    exc=e,
                )
            )
    return out, ctx


def _expand_single(registry: Registry, state: Any, action: Sequence[Any]) -> Outcome[Tuple[Any, ...]]:
    key, *args = action
    registration = registry.actions[key]
    try:
        expanded = registration.handler(state, *args)
        if expanded is None:
            expanded = ()
        if isinstance(expanded, (str, bytes, Mapping)) or not isinstance(expanded, Iterable):
            raise InvalidActionExpansion(
                message="Action handler must return a sequence of operations",
                details={"action_key": key, "received": type(expanded).__name__},
                hint="Retorne uma lista de vetores [chave, *args].",
            )
        return Outcome.success(tuple(expanded))
    except Exception as e:
        return Outcome.failure(
            handler_exception(phase=ErrorPhase.EXPAND_ACTION, subject=action, exc=e)
        )


def _expand_action(registry: Registry, ctx: DispatchContext, action: Sequence[Any]) -> Tuple[List[Any], DispatchContext]:
    """Expande uma ação envolta pelos hooks before/after-action."""

    def run(actx: ActionContext) -> ActionContext:
        outcome = _expand_single(registry, actx.state, action)
        if outcome.failed:
            return replace(actx.with_error(outcome.error), actions=())
        return replace(actx, actions=outcome.value)

    after = wrap_phase(registry.interceptors, "action", ctx.action_context(action), run)
    produced = list(after.actions or ())
    # halt na fase de ação vale apenas para esta ação
    return produced, replace(ctx.absorb(after), halted=ctx.halted)


def _expand(
    registry: Registry,
    ctx: DispatchContext,
    operations: Sequence[Any],
    max_depth: int,
    *,
    limit: int,
    interpolation_depth: int,
    parent: Optional[Sequence[Any]],
) -> Tuple[List[Any], DispatchContext]:
    if max_depth <= 0:
        return [], ctx.with_error(max_depth_exceeded(subject=parent, max_depth=limit))

    effects: List[Any] = []
    for operation in operations:
        kind = registry.classify(operation_key(operation))

        if kind is OperationKind.EFFECT:
            effects.append(operation)

        elif kind is OperationKind.ACTION:
            produced, ctx = _expand_action(registry, ctx, operation)
            if not produced:
                continue
            produced, ctx = interpolate_operations(
                registry, ctx, produced, interpolation_depth, subject=operation
            )
            nested, ctx = _expand(
                registry,
                ctx,
                produced,
                max_depth - 1,
                limit=limit,
                interpolation_depth=interpolation_depth,
                parent=operation,
            )
            effects.extend(nested)

        else:
            ctx = ctx.with_error(
                unknown_action_or_effect(operation=operation, available=registry.keys())
            )

    return effects, ctx


def expand(
    registry: Registry,
    ctx: DispatchContext,
    operations: Sequence[Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    interpolation_depth: int = DEFAULT_INTERPOLATION_DEPTH,
) -> DispatchContext:
    """
    Expande `operations` até restarem apenas efeitos.

    Returns:
        DispatchContext: contexto cujo `actions` é a lista achatada de efeitos,
        com os erros de expansão acumulados em `errors`.
    """
    effects, ctx = _expand(
        registry,
        ctx,
        operations,
        max_depth,
        limit=max_depth,
        interpolation_depth=interpolation_depth,
        parent=None,
    )
    return replace(ctx, actions=tuple(effects))
