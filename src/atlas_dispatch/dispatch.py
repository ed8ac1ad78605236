# src/atlas_dispatch/dispatch.py
"""
API pública de dispatch do Atlas Dispatch.

`create_dispatch` resolve e mescla os registries, aplica a configuração
(seção `dispatch`) e devolve um `Dispatch` chamável:

    dispatch = create_dispatch([db_registry, http_registry], config=config)

    dispatch(operations)                          # sistema {} e dispatch-data {}
    dispatch(system, operations)                  # dispatch-data {}
    dispatch(system, dispatch_data, operations)

Toda chamada devolve um `DispatchResult`; falhas de handlers, hooks e
placeholders nunca são levantadas, apenas acumuladas em `errors`.

Decisões arquiteturais:
    - Erros estruturais (registry inválido, configuração inválida) são
      levantados na construção, nunca durante o dispatch
    - `fail_fast: true` acrescenta o interceptor embutido ao final da cadeia
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Union

from atlas_dispatch.core.config.loader import DispatchConfig
from atlas_dispatch.core.config.settings import DispatchSettings
from atlas_dispatch.core.engine.engine import DispatchEngine
from atlas_dispatch.core.engine.interceptors import fail_fast
from atlas_dispatch.core.pipeline.types import DispatchResult
from atlas_dispatch.core.registry.merge import RegistrySpec, merge_registries
from atlas_dispatch.core.registry.registry import Registry


class Dispatch:
    """Dispatcher chamável sobre um `Registry` já mesclado."""

    def __init__(self, *, registry: Registry, settings: Optional[DispatchSettings] = None):
        self._engine = DispatchEngine(registry=registry, settings=settings)

    @property
    def registry(self) -> Registry:
        return self._engine.registry

    @property
    def settings(self) -> DispatchSettings:
        return self._engine.settings

    def __call__(self, *args: Any) -> DispatchResult:
        if len(args) == 1:
            system, dispatch_data, operations = {}, {}, args[0]
        elif len(args) == 2:
            system, operations = args
            dispatch_data = {}
        elif len(args) == 3:
            system, dispatch_data, operations = args
        else:
            raise TypeError(
                "dispatch() takes (operations), (system, operations) "
                f"or (system, dispatch_data, operations); got {len(args)} arguments"
            )
        return self._engine.run(system, dispatch_data, operations)

    def __repr__(self) -> str:
        r = self.registry
        return (
            f"Dispatch(effects={len(r.effects)}, actions={len(r.actions)}, "
            f"placeholders={len(r.placeholders)}, interceptors={len(r.interceptors)})"
        )


def create_dispatch(
    registries: Union[RegistrySpec, Iterable[RegistrySpec]],
    *,
    config: Optional[Union[DispatchConfig, Mapping[str, Any]]] = None,
    settings: Optional[DispatchSettings] = None,
) -> Dispatch:
    """
    Constrói um `Dispatch` a partir de uma ou mais especificações de registry.

    Args:
        registries: um Registry/mapa/função produtora, ou uma sequência de especificações
            (Registry, mapa, função produtora ou `[produtor, *args]`).
        config: `DispatchConfig` (ver `load_config`) ou mapa já resolvido;
            apenas a seção `dispatch` é usada.
        settings: parâmetros explícitos; quando informado, `config` é ignorada.

    Raises:
        InvalidRegistrySpecError: especificação de registry inválida.
        RegistryKeyCollisionError: chave registrada como efeito e ação.
        InvalidSettingsError: seção `dispatch` inválida.
    """
    if isinstance(registries, (Registry, Mapping)) or callable(registries):
        registries = [registries]

    registry = merge_registries(registries)
    if settings is None:
        if isinstance(config, DispatchConfig):
            settings = config.settings
        else:
            settings = DispatchSettings.from_config(config)

    if settings.fail_fast:
        registry = replace(registry, interceptors=registry.interceptors + (fail_fast,))

    return Dispatch(registry=registry, settings=settings)
