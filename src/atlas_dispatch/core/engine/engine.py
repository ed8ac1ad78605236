# src/atlas_dispatch/core/engine/engine.py
"""
Engine de dispatch do Atlas Dispatch (orquestrador).

Sequência de fases de um dispatch:

    BeforeDispatch → Interpolate → ExpandActions → ExecuteEffects → AfterDispatch

1. Constrói o contexto inicial e deriva `state` via `registry.system_to_state`
2. Executa os hooks before-dispatch; se `halted`, pula direto para o passo 5
3. Interpola placeholders com o dispatch-data (possivelmente alterado por hooks)
4. Expande ações até restarem efeitos e executa os efeitos em ordem
5. Executa os hooks after-dispatch (ordem reversa) e monta o `DispatchResult`

Decisões arquiteturais:
    - O engine nunca levanta exceções para o chamador: toda falha vira
      `ErrorRecord` em `DispatchResult.errors`
    - A continuação entregue aos efeitos reentra em `DispatchEngine.run`
      (referência injetada, sem declaração antecipada)
    - Hooks before-dispatch podem reescrever `ctx.actions` (a lista de
      entrada) e `ctx.dispatch_data`

Invariantes:
    - Todo dispatch termina, mesmo com grafos cíclicos de ações/placeholders
    - Cada chamada de `run` é independente: nenhum estado é compartilhado

Limites explícitos:
    - Não resolve nem mescla registries (ver `core.registry.merge`)
    - Não carrega configuração (recebe `DispatchSettings` já resolvido)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from atlas_dispatch.core.config.settings import DispatchSettings
from atlas_dispatch.core.errors import ErrorPhase, handler_exception, invalid_operations
from atlas_dispatch.core.pipeline.context import DispatchContext
from atlas_dispatch.core.pipeline.types import DispatchResult
from atlas_dispatch.core.registry.registry import Registry

from .actions import expand, interpolate_operations
from .effects import execute_effects
from .interceptors import run_after, run_before


class DispatchEngine:
    """Engine canônico do Atlas Dispatch (expansão + execução)."""

    def __init__(self, *, registry: Registry, settings: Optional[DispatchSettings] = None):
        self.registry: Registry = registry
        self.settings: DispatchSettings = settings or DispatchSettings()

    def _initial_context(
        self,
        system: Any,
        dispatch_data: Optional[Mapping[str, Any]],
        operations: Optional[Sequence[Any]],
    ) -> DispatchContext:
        ctx = DispatchContext(
            system=system,
            dispatch_data=dispatch_data if dispatch_data is not None else {},
        )
        if operations is None:
            operations = ()
        if isinstance(operations, (str, bytes, Mapping)) or not isinstance(operations, Iterable):
            ctx = ctx.with_error(invalid_operations(operations=operations))
        else:
            ctx = replace(ctx, actions=tuple(operations))

        try:
            return replace(ctx, state=self.registry.get_state(system))
        except Exception as e:
            return ctx.with_error(
                handler_exception(phase=ErrorPhase.EXPAND_ACTION, subject=None, exc=e)
            )

    def run(
        self,
        system: Any,
        dispatch_data: Optional[Mapping[str, Any]],
        operations: Optional[Sequence[Any]],
    ) -> DispatchResult:
        """
        Executa um dispatch completo.

        Args:
            system: sistema vivo entregue aos handlers de efeito.
            dispatch_data: dados disponíveis a placeholders e handlers.
            operations: lista de vetores de operação `[chave, *args]`.

        Returns:
            DispatchResult: efeitos executados e erros acumulados, em ordem.
        """
        registry = self.registry
        settings = self.settings

        ctx = self._initial_context(system, dispatch_data, operations)
        ctx = run_before(registry.interceptors, "dispatch", ctx)

        if not ctx.halted:
            pending, ctx = interpolate_operations(
                registry, ctx, ctx.actions, settings.max_interpolation_depth
            )
            ctx = expand(
                registry,
                ctx,
                pending,
                settings.max_action_depth,
                interpolation_depth=settings.max_interpolation_depth,
            )
            ctx = execute_effects(registry, ctx, ctx.actions, dispatch_fn=self.run)

        ctx = run_after(registry.interceptors, "dispatch", ctx)
        return DispatchResult(results=ctx.results, errors=ctx.errors)


def dispatch(
    registry: Registry,
    system: Any,
    dispatch_data: Optional[Mapping[str, Any]],
    operations: Optional[Sequence[Any]],
    *,
    settings: Optional[DispatchSettings] = None,
) -> DispatchResult:
    """Atalho funcional: `DispatchEngine(registry=..., settings=...).run(...)`."""
    return DispatchEngine(registry=registry, settings=settings).run(system, dispatch_data, operations)
