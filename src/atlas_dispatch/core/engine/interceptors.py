# src/atlas_dispatch/core/engine/interceptors.py
"""
Cadeia de interceptors do Atlas Dispatch.

Interceptors oferecem hooks de ciclo de vida para instrumentar um dispatch:
    - before_dispatch / after_dispatch
    - before_action   / after_action
    - before_effect   / after_effect

Disciplina de execução:
    - hooks `before_*` executam em ordem de registro (fila)
    - hooks `after_*` executam em ordem reversa (pilha): o interceptor mais
      próximo do handler observa o resultado primeiro

Decisões arquiteturais:
    - Cada hook é isolado: exceção → ErrorRecord com fase e id do interceptor,
      e a cadeia continua com o contexto anterior ao hook que falhou
    - Um hook que não devolve um contexto do mesmo tipo é tratado como falha
    - `halted` em um before-pass pula os hooks restantes e a operação
      envolvida, mas o after-pass correspondente sempre executa

Invariantes:
    - Nenhuma exceção de hook escapa desta camada
    - A mutação proposta por um hook que falhou é descartada

Limites explícitos:
    - Não executa efeitos nem expande ações (recebe a função de execução)
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, TypeVar

from atlas_dispatch.core.errors import interceptor_exception
from atlas_dispatch.core.exceptions import InvalidInterceptorResult
from atlas_dispatch.core.pipeline.context import ActionContext, DispatchContext, EffectContext
from atlas_dispatch.core.registry.types import Interceptor

C = TypeVar("C", bound=DispatchContext)

FAIL_FAST_ID = "atlas_dispatch/fail-fast"


def _subject(ctx: DispatchContext) -> Any:
    if isinstance(ctx, ActionContext):
        return ctx.action
    if isinstance(ctx, EffectContext):
        return ctx.effect
    return ctx.actions


def _run_hook(interceptor: Interceptor, hook_name: str, ctx: C) -> C:
    hook = interceptor.hook(hook_name)
    if hook is None:
        return ctx

    try:
        out = hook(ctx)
    except Exception as e:
        return ctx.with_error(
            interceptor_exception(
                hook_name=hook_name,
                interceptor_id=interceptor.id,
                subject=_subject(ctx),
                exc=e,
            )
        )

    if not isinstance(out, type(ctx)):
        return ctx.with_error(
            interceptor_exception(
                hook_name=hook_name,
                interceptor_id=interceptor.id,
                subject=_subject(ctx),
                exc=InvalidInterceptorResult(
                    message="Interceptor hook must return the context it received",
                    details={
                        "expected": type(ctx).__name__,
                        "received": type(out).__name__,
                    },
                    hint="Retorne o contexto recebido (ou um derivado via dataclasses.replace).",
                ),
            )
        )
    return out


def run_before(interceptors: Sequence[Interceptor], phase: str, ctx: C) -> C:
    """Executa os hooks `before_<phase>` em ordem de registro, parando se `halted`."""
    hook_name = f"before_{phase}"
    for interceptor in interceptors:
        if ctx.halted:
            break
        ctx = _run_hook(interceptor, hook_name, ctx)
    return ctx


def run_after(interceptors: Sequence[Interceptor], phase: str, ctx: C) -> C:
    """Executa os hooks `after_<phase>` em ordem reversa de registro."""
    hook_name = f"after_{phase}"
    for interceptor in reversed(tuple(interceptors)):
        ctx = _run_hook(interceptor, hook_name, ctx)
    return ctx


def wrap_phase(
    interceptors: Sequence[Interceptor],
    phase: str,
    ctx: C,
    execute: Callable[[C], C],
) -> C:
    """
    Envolve a execução de uma fase com os hooks before/after correspondentes.

    Se o before-pass terminar com `halted`, `execute` não é chamado; o
    after-pass executa de qualquer forma.
    """
    ctx = run_before(interceptors, phase, ctx)
    if not ctx.halted:
        ctx = execute(ctx)
    return run_after(interceptors, phase, ctx)


# =============================================================================
# Interceptors embutidos
# =============================================================================

def _halt_on_errors(ctx: C) -> C:
    if ctx.errors:
        return ctx.halt()
    return ctx


fail_fast = Interceptor(
    id=FAIL_FAST_ID,
    before_dispatch=_halt_on_errors,
    before_action=_halt_on_errors,
    before_effect=_halt_on_errors,
)
"""Interceptor que interrompe o trabalho restante assim que houver erros acumulados.

Resultados já coletados são preservados; apenas o trabalho seguinte é pulado.
"""
