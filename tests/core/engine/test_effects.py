# tests/core/engine/test_effects.py
"""
Testes da execução de efeitos.

Os testes asseguram que:
- handlers recebem `(handler_ctx, system, *args)`
- sucesso acrescenta um EffectResult; falha, exatamente um ErrorRecord
- efeitos desconhecidos não invocam handler algum
- a continuação aceita 1, 2 ou 3 argumentos e rejeita outras aridades
- `halted` interrompe o restante do lote
"""

import pytest

try:
    from atlas_dispatch.core.engine.effects import execute, execute_effects, make_continuation
    from atlas_dispatch.core.errors import ErrorPhase, HANDLER_EXCEPTION, UNKNOWN_EFFECT
    from atlas_dispatch.core.pipeline.context import DispatchContext
    from atlas_dispatch.core.registry.merge import merge_registries
    from atlas_dispatch.core.registry.types import Interceptor
except Exception as e:  # noqa: BLE001
    execute = None
    execute_effects = None
    make_continuation = None
    ErrorPhase = None
    HANDLER_EXCEPTION = None
    UNKNOWN_EFFECT = None
    DispatchContext = None
    merge_registries = None
    Interceptor = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing effects module. Implement:\n"
            "- src/atlas_dispatch/core/engine/effects.py (execute, execute_effects)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_handler_receives_context_system_and_args(sample_registry_map):
    """O handler observa o sistema, o dispatch-data e os argumentos do vetor."""
    _require_imports()
    seen = []

    def spy(handler_ctx, system, *args):
        seen.append((handler_ctx.system, dict(handler_ctx.dispatch_data), system, args))
        return "done"

    sample_registry_map["effects"]["test/spy"] = {"handler": spy}
    registry = merge_registries([sample_registry_map])
    ctx = DispatchContext(system={"db": "conn"}, dispatch_data={"k": 1})

    out = execute(registry, ctx, ["test/spy", 1, "two"])

    assert seen == [({"db": "conn"}, {"k": 1}, {"db": "conn"}, (1, "two"))]
    (result,) = out.results
    assert result.effect == ["test/spy", 1, "two"]
    assert result.value == "done"


def test_failure_and_unknown_effect_are_recorded(sample_registry, calls):
    """
    Verifica a captura de falhas de execução.

    Invariantes:
        - exceção de handler → `execute-effect` / HANDLER_EXCEPTION
        - chave desconhecida → `execute-effect` / UNKNOWN_EFFECT, sem chamada
        - os efeitos irmãos continuam executando
    """
    _require_imports()
    ctx = execute_effects(
        sample_registry,
        DispatchContext(),
        [["test/ok", "x"], ["test/boom"], ["nope"], ["test/ok", "y"]],
    )

    assert [r.value for r in ctx.results] == [["x"], ["y"]]
    assert [(e.phase, e.type) for e in ctx.errors] == [
        (ErrorPhase.EXECUTE_EFFECT, HANDLER_EXCEPTION),
        (ErrorPhase.EXECUTE_EFFECT, UNKNOWN_EFFECT),
    ]
    assert calls == [("test/ok", ("x",)), ("test/ok", ("y",))]


def test_halt_stops_remaining_batch(sample_registry_map, calls):
    """Um hook que interrompe no primeiro efeito impede a execução dos seguintes."""
    _require_imports()
    sample_registry_map["interceptors"] = [Interceptor(id="stop", after_effect=lambda ctx: ctx.halt())]
    registry = merge_registries([sample_registry_map])

    ctx = execute_effects(registry, DispatchContext(), [["test/ok", 1], ["test/ok", 2]])

    assert ctx.halted is True
    assert calls == [("test/ok", (1,))]
    assert len(ctx.results) == 1


def test_continuation_arities():
    """
    Verifica as três formas de chamada da continuação.

    Invariantes:
        - 1 argumento: mesmo sistema e dispatch-data original
        - 2 argumentos: dados extras mesclados sobre o original
        - 3 argumentos: sistema e dados mesclados
        - outras aridades levantam TypeError
    """
    _require_imports()
    received = []

    def fake_dispatch(system, dispatch_data, operations):
        received.append((system, dispatch_data, operations))
        return "nested"

    dispatch = make_continuation(fake_dispatch, {"db": 1}, {"a": 1})

    assert dispatch([["x"]]) == "nested"
    dispatch({"b": 2}, [["y"]])
    dispatch({"cache": 2}, {"a": 9}, [["z"]])

    assert received == [
        ({"db": 1}, {"a": 1}, [["x"]]),
        ({"db": 1}, {"a": 1, "b": 2}, [["y"]]),
        ({"db": 1, "cache": 2}, {"a": 9}, [["z"]]),
    ]

    with pytest.raises(TypeError):
        dispatch()
    with pytest.raises(TypeError):
        dispatch(1, 2, 3, 4)


def test_non_mapping_system_override_replaces_system():
    """Um sistema não-mapa passado à continuação substitui o sistema corrente."""
    _require_imports()
    received = []
    dispatch = make_continuation(lambda s, d, o: received.append(s), {"db": 1}, {})

    dispatch("other-system", {}, [])
    dispatch(None, {}, [])

    assert received == ["other-system", {"db": 1}]
