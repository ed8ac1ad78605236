# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Dispatch.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas em YAML (defaults + overrides locais)
- um registrador de chamadas (`calls`) para observar efeitos
- um registry de exemplo com efeitos, ações e placeholders determinísticos

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Handlers de teste registram chamadas em uma lista, sem I/O
    - Imports do core são realizados de forma lazy para melhorar a
      clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa dispatch
    - Nenhuma fixture compartilha estado entre testes

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Returns:
        str: Conteúdo YAML de `config.defaults.yaml`.
    """
    return """\
dispatch:
  max_action_depth: 100
  max_interpolation_depth: 10
  fail_fast: false
app:
  name: orders
  tags: [a, b]
"""


@pytest.fixture
def config_local_yaml() -> str:
    """YAML de overrides locais (`config.local.yaml`)."""
    return """\
dispatch:
  fail_fast: true
app:
  tags: [c]
"""


# =====================================================
# Registry fixtures
# =====================================================

@pytest.fixture
def calls() -> list:
    """Lista onde os handlers de teste registram `(chave, args)` na ordem de chamada."""
    return []


@pytest.fixture
def sample_registry_map(calls) -> dict:
    """
    Mapa de registry com efeitos, ações e placeholders determinísticos.

    Efeitos:
        - test/ok      → registra a chamada e devolve os argumentos
        - test/boom    → sempre levanta RuntimeError
        - test/record  → registra `(dispatch_data, args)`
    Ações:
        - test/pair    → [[test/ok, x], [test/ok, y]]
        - test/nested  → [[test/pair, x, x]]
        - test/loop    → [[test/loop]] (ciclo infinito)
        - test/from-state → efeito com o valor de `state["value"]`
    Placeholders:
        - test/data    → dispatch_data[chave], ou o próprio vetor se ausente
        - test/upper   → str(arg).upper()
    """

    def ok(ctx, system, *args):
        calls.append(("test/ok", args))
        return list(args)

    def boom(ctx, system, *args):
        raise RuntimeError("boom")

    def record(ctx, system, *args):
        calls.append(("test/record", dict(ctx.dispatch_data), args))
        return None

    def data(dispatch_data, key):
        if key in dispatch_data:
            return dispatch_data[key]
        return ["test/data", key]

    return {
        "effects": {
            "test/ok": {"handler": ok, "description": "Echo args", "schema": ["tuple", "test/ok"]},
            "test/boom": {"handler": boom, "description": "Always fails"},
            "test/record": {"handler": record, "description": "Record dispatch data"},
        },
        "actions": {
            "test/pair": {"handler": lambda state, x, y: [["test/ok", x], ["test/ok", y]]},
            "test/nested": {"handler": lambda state, x: [["test/pair", x, x]]},
            "test/loop": {"handler": lambda state: [["test/loop"]]},
            "test/from-state": {"handler": lambda state: [["test/ok", state["value"]]]},
        },
        "placeholders": {
            "test/data": {"handler": data, "description": "Read dispatch data"},
            "test/upper": {"handler": lambda dispatch_data, v: str(v).upper()},
        },
    }


@pytest.fixture
def sample_registry(sample_registry_map):
    """`Registry` construído a partir de `sample_registry_map`."""
    from atlas_dispatch.core.registry.merge import registry_from_mapping

    return registry_from_mapping(sample_registry_map)


@pytest.fixture
def sample_dispatch(sample_registry_map):
    """`Dispatch` com os parâmetros padrão sobre `sample_registry_map`."""
    from atlas_dispatch.dispatch import create_dispatch

    return create_dispatch([sample_registry_map])
