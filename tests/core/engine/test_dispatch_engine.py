# tests/core/engine/test_dispatch_engine.py
"""
Testes do orquestrador de dispatch (DispatchEngine).

Este módulo valida as propriedades de ponta a ponta de um dispatch:
- isolamento de erros entre efeitos
- preservação de ordem após expansão
- ordem LIFO dos hooks after
- escopo do dispatch-data na continuação
- resolução de placeholders auto-preservados via continuação
- interrupção por hooks before-dispatch
- falha de `system_to_state` registrada como erro, sem levantar

Invariantes:
    - `run` nunca levanta exceções para o chamador
    - resultados parciais coexistem com erros
"""

from dataclasses import replace

import pytest

try:
    from atlas_dispatch.core.config.settings import DispatchSettings
    from atlas_dispatch.core.engine.engine import DispatchEngine, dispatch
    from atlas_dispatch.core.errors import (
        ErrorPhase,
        HANDLER_EXCEPTION,
        INVALID_OPERATIONS,
        MAX_DEPTH_EXCEEDED,
    )
    from atlas_dispatch.core.registry.merge import merge_registries
    from atlas_dispatch.core.registry.types import Interceptor
except Exception as e:  # noqa: BLE001
    DispatchSettings = None
    DispatchEngine = None
    dispatch = None
    ErrorPhase = None
    HANDLER_EXCEPTION = None
    INVALID_OPERATIONS = None
    MAX_DEPTH_EXCEEDED = None
    merge_registries = None
    Interceptor = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing engine module. Implement:\n"
            "- src/atlas_dispatch/core/engine/engine.py (DispatchEngine, dispatch)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_error_isolation(sample_registry):
    """
    `[[ok x] [boom] [ok y]]` produz os dois resultados `ok` e exatamente
    um erro `execute-effect`.
    """
    _require_imports()
    result = dispatch(sample_registry, {}, {}, [["test/ok", "x"], ["test/boom"], ["test/ok", "y"]])

    assert [r.effect for r in result.results] == [["test/ok", "x"], ["test/ok", "y"]]
    (error,) = result.errors
    assert error.phase is ErrorPhase.EXECUTE_EFFECT
    assert error.subject == ["test/boom"]
    assert result.ok is False


def test_order_is_preserved_across_expansion(sample_registry, calls):
    """Efeitos executam na ordem da lista achatada, incluindo os produzidos por ações."""
    _require_imports()
    dispatch(sample_registry, {}, {}, [["test/ok", 1], ["test/pair", 2, 3], ["test/ok", 4]])
    assert [args for _, args in calls] == [(1,), (2,), (3,), (4,)]


def test_after_action_hooks_run_lifo(sample_registry_map):
    """Interceptors A, B, C registrados → after-action chamado como C, B, A."""
    _require_imports()
    order = []

    def recorder(name):
        def hook(ctx):
            order.append(name)
            return ctx

        return hook

    sample_registry_map["interceptors"] = [Interceptor(id=n, after_action=recorder(n)) for n in "ABC"]
    registry = merge_registries([sample_registry_map])

    dispatch(registry, {}, {}, [["test/pair", 1, 2]])

    assert order == ["C", "B", "A"]


def test_continuation_dispatch_data_scoping(sample_registry_map, calls):
    """
    Verifica o escopo do dispatch-data da continuação.

    Invariantes:
        - o filho observa `parent_data` mesclado sobre o dispatch-data original
        - o efeito irmão executado depois não observa `parent_data`
    """
    _require_imports()

    def parent(ctx, system):
        return ctx.dispatch({"parent_data": "p"}, [["test/record", "child"]])

    sample_registry_map["effects"]["test/parent"] = {"handler": parent}
    registry = merge_registries([sample_registry_map])

    result = dispatch(registry, {}, {"base": 1}, [["test/parent"], ["test/record", "sibling"]])

    assert result.errors == ()
    assert calls == [
        ("test/record", {"base": 1, "parent_data": "p"}, ("child",)),
        ("test/record", {"base": 1}, ("sibling",)),
    ]
    nested = result.results[0].value
    assert [r.effect for r in nested.results] == [["test/record", "child"]]


def test_self_preserving_placeholder_resolves_through_continuation(sample_registry_map):
    """
    `[[fetch url [[use [result]]]]]`: o handler de fetch despacha a
    continuação com `fetch_result`, e `use` recebe o valor resolvido,
    nunca o vetor do placeholder.
    """
    _require_imports()
    used = []

    def fetch(ctx, system, url, continuation):
        return ctx.dispatch({"fetch_result": {"data": "X", "url": url}}, continuation)

    def use(ctx, system, value):
        used.append(value)

    def fetch_result(dispatch_data):
        return dispatch_data.get("fetch_result", ["test/fetch-result"])

    sample_registry_map["effects"]["test/fetch"] = {"handler": fetch}
    sample_registry_map["effects"]["test/use"] = {"handler": use}
    sample_registry_map["placeholders"]["test/fetch-result"] = {"handler": fetch_result}
    registry = merge_registries([sample_registry_map])

    result = dispatch(
        registry, {}, {}, [["test/fetch", "http://x", [["test/use", ["test/fetch-result"]]]]]
    )

    assert result.errors == ()
    assert used == [{"data": "X", "url": "http://x"}]


def test_before_dispatch_halt_skips_everything(sample_registry_map, calls):
    """Um before-dispatch que interrompe pula interpolação, expansão e execução."""
    _require_imports()
    after = []

    def after_dispatch(ctx):
        after.append(ctx.halted)
        return ctx

    sample_registry_map["interceptors"] = [
        Interceptor(id="gate", before_dispatch=lambda ctx: ctx.halt(), after_dispatch=after_dispatch)
    ]
    registry = merge_registries([sample_registry_map])

    result = dispatch(registry, {}, {}, [["test/ok", 1]])

    assert calls == []
    assert result.results == () and result.errors == ()
    assert after == [True]


def test_before_dispatch_can_rewrite_input(sample_registry_map, calls):
    """Hooks before-dispatch podem alterar as operações e o dispatch-data."""
    _require_imports()

    def rewrite(ctx):
        return replace(
            ctx,
            actions=ctx.actions + (["test/ok", ["test/data", "extra"]],),
            dispatch_data={**ctx.dispatch_data, "extra": "added"},
        )

    sample_registry_map["interceptors"] = [Interceptor(id="rewrite", before_dispatch=rewrite)]
    registry = merge_registries([sample_registry_map])

    dispatch(registry, {}, {}, [["test/ok", 1]])

    assert calls == [("test/ok", (1,)), ("test/ok", ("added",))]


def test_system_to_state_failure_is_recorded(sample_registry_map):
    """Uma falha em `system_to_state` vira erro `expand-action` e o dispatch continua."""
    _require_imports()
    sample_registry_map["system_to_state"] = lambda system: system["missing"]
    registry = merge_registries([sample_registry_map])

    result = dispatch(registry, {}, {}, [["test/ok", 1]])

    assert len(result.results) == 1
    (error,) = result.errors
    assert error.phase is ErrorPhase.EXPAND_ACTION
    assert error.type == HANDLER_EXCEPTION
    assert isinstance(error.cause, KeyError)


def test_state_is_derived_from_system(sample_registry_map):
    """Ações recebem o estado derivado do sistema via `system_to_state`."""
    _require_imports()
    sample_registry_map["system_to_state"] = lambda system: {"value": system["counter"] + 1}
    registry = merge_registries([sample_registry_map])

    result = dispatch(registry, {"counter": 41}, {}, [["test/from-state"]])

    assert [r.value for r in result.results] == [[42]]


def test_settings_bound_action_depth(sample_registry):
    """`max_action_depth` das settings limita a expansão."""
    _require_imports()
    engine = DispatchEngine(registry=sample_registry, settings=DispatchSettings(max_action_depth=3))

    result = engine.run({}, {}, [["test/loop"]])

    assert [e.type for e in result.errors] == [MAX_DEPTH_EXCEEDED]
    assert result.errors[0].cause.details["max_depth"] == 3


def test_none_inputs_are_treated_as_empty(sample_registry):
    """dispatch-data e operações None equivalem a `{}` e `[]`."""
    _require_imports()
    result = DispatchEngine(registry=sample_registry).run(None, None, None)
    assert result.results == () and result.errors == ()


def test_action_halt_skips_only_that_action(sample_registry_map, calls):
    """
    Verifica o escopo de `halted` levantado em before-action.

    Invariantes:
        - apenas a ação interrompida deixa de ser expandida
        - o after-action da ação interrompida executa
        - efeitos irmãos (antes e depois) são executados
    """
    _require_imports()
    after = []

    def skip_pair(ctx):
        if ctx.action[0] == "test/pair":
            return ctx.halt()
        return ctx

    def after_action(ctx):
        after.append((ctx.action[0], ctx.halted))
        return ctx

    sample_registry_map["interceptors"] = [
        Interceptor(id="skip-pair", before_action=skip_pair, after_action=after_action)
    ]
    registry = merge_registries([sample_registry_map])

    result = dispatch(
        registry, {}, {}, [["test/ok", "a"], ["test/pair", 1, 2], ["test/nested", 3], ["test/ok", "c"]]
    )

    assert after == [("test/pair", True), ("test/nested", False), ("test/pair", True)]
    assert calls == [("test/ok", ("a",)), ("test/ok", ("c",))]
    assert [r.effect for r in result.results] == [["test/ok", "a"], ["test/ok", "c"]]
    assert result.errors == ()


@pytest.mark.parametrize("operations", [5, "test/ok", {"test/ok": 1}])
def test_invalid_operations_are_recorded(sample_registry, calls, operations):
    """Operações que não são uma lista de vetores viram erro INVALID_OPERATIONS, sem levantar."""
    _require_imports()
    result = dispatch(sample_registry, {}, {}, operations)

    assert calls == []
    assert result.results == ()
    (error,) = result.errors
    assert error.phase is ErrorPhase.EXPAND_ACTION
    assert error.type == INVALID_OPERATIONS
    assert error.cause.details["received"] == type(operations).__name__
