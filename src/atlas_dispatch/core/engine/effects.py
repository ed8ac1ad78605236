# src/atlas_dispatch/core/engine/effects.py
"""
Execução de efeitos do Atlas Dispatch.

Um efeito é invocado como `handler(handler_ctx, system, *args)`, onde
`handler_ctx` expõe a função de continuação (`dispatch`), o dispatch-data
do lote e o sistema. Cada execução é envolta pelos hooks before/after-effect.

Continuação (`handler_ctx.dispatch`), sempre síncrona e recursiva:
    - dispatch(efeitos)                       → mesmo sistema e dispatch-data
    - dispatch(dados_extra, efeitos)          → dados_extra sobre o dispatch-data original
    - dispatch(sistema_extra, dados_extra, efeitos) → sistema e dados mesclados

Decisões arquiteturais:
    - O dispatch-data base da continuação é o capturado no início do lote,
      para que efeitos irmãos não vejam os dados de continuação uns dos outros
    - A função de dispatch é injetada (referência), sem declaração antecipada
    - Exceções de handlers viram ErrorRecord `execute-effect`; nunca propagam

Invariantes:
    - Sucesso acrescenta exatamente um EffectResult; falha, exatamente um erro
    - Uma falha nunca interrompe os efeitos irmãos (apenas `halted` o faz)

Limites explícitos:
    - Não expande ações
    - Não interpola placeholders (exceto via dispatch aninhado)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Sequence

from atlas_dispatch.core.errors import ErrorPhase, handler_exception, unknown_effect
from atlas_dispatch.core.pipeline.context import DispatchContext, EffectContext, HandlerContext
from atlas_dispatch.core.pipeline.types import EffectResult, Outcome
from atlas_dispatch.core.registry.registry import Registry, operation_key

from .interceptors import wrap_phase

# (system, dispatch_data, operations) -> DispatchResult
DispatchFn = Callable[[Any, Mapping[str, Any], Sequence[Any]], Any]


def _merge_system(system: Any, override: Any) -> Any:
    if override is None:
        return system
    if isinstance(system, Mapping) and isinstance(override, Mapping):
        return {**system, **override}
    return override


def make_continuation(dispatch_fn: DispatchFn, system: Any, dispatch_data: Mapping[str, Any]) -> Callable[..., Any]:
    """Cria a função de continuação entregue aos handlers de um lote de efeitos."""

    def dispatch(*args: Any) -> Any:
        if len(args) == 1:
            system_override, extra, operations = None, None, args[0]
        elif len(args) == 2:
            extra, operations = args
            system_override = None
        elif len(args) == 3:
            system_override, extra, operations = args
        else:
            raise TypeError(
                "dispatch() takes (operations), (dispatch_data, operations) "
                f"or (system, dispatch_data, operations); got {len(args)} arguments"
            )
        return dispatch_fn(
            _merge_system(system, system_override),
            {**dispatch_data, **(extra or {})},
            operations,
        )

    return dispatch


def _execute_single(registry: Registry, handler_ctx: HandlerContext, effect: Sequence[Any]) -> Outcome[EffectResult]:
    key = operation_key(effect)
    registration = None
    try:
        registration = registry.effects.get(key)
    except TypeError:
        pass
    if registration is None:
        return Outcome.failure(unknown_effect(effect=effect, available=list(registry.effects)))

    try:
        value = registration.handler(handler_ctx, handler_ctx.system, *effect[1:])
    except Exception as e:
        return Outcome.failure(
            handler_exception(phase=ErrorPhase.EXECUTE_EFFECT, subject=effect, exc=e)
        )
    return Outcome.success(EffectResult(effect=effect, value=value))


def execute(registry: Registry, ctx: DispatchContext, effect: Sequence[Any]) -> DispatchContext:
    """
    Executa um único efeito, envolto pelos hooks before/after-effect.

    O handler recebe `HandlerContext(ctx.dispatch, ctx.dispatch_data, ctx.system)`.
    """
    handler_ctx = HandlerContext(
        dispatch=ctx.dispatch,
        dispatch_data=ctx.dispatch_data,
        system=ctx.system,
    )

    def run(ectx: EffectContext) -> EffectContext:
        outcome = _execute_single(registry, handler_ctx, effect)
        if outcome.failed:
            return ectx.with_error(outcome.error)
        return replace(ectx.with_result(outcome.value), result=outcome.value)

    after = wrap_phase(registry.interceptors, "effect", ctx.effect_context(effect), run)
    return ctx.absorb(after)


def execute_effects(
    registry: Registry,
    ctx: DispatchContext,
    effects: Sequence[Any],
    dispatch_fn: Optional[DispatchFn] = None,
) -> DispatchContext:
    """
    Executa um lote de efeitos em ordem, parando apenas se `halted`.

    Quando `dispatch_fn` é informado, a continuação do lote é construída
    sobre o sistema e o dispatch-data do contexto neste momento.
    """
    if dispatch_fn is not None:
        ctx = replace(ctx, dispatch=make_continuation(dispatch_fn, ctx.system, ctx.dispatch_data))

    for effect in effects:
        if ctx.halted:
            break
        ctx = execute(registry, ctx, effect)
    return ctx
