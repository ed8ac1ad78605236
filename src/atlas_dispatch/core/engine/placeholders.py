# src/atlas_dispatch/core/engine/placeholders.py
"""
Interpolação de placeholders do Atlas Dispatch.

Placeholders são vetores `[chave, *args]` cuja chave está registrada em
`registry.placeholders`. Durante o dispatch, eles são substituídos pelo
valor retornado por `handler(dispatch_data, *args)`.

Regras de resolução:
    - A estrutura é percorrida recursivamente: listas/tuplas elemento a
      elemento, mapas valor a valor (chaves intocadas)
    - Argumentos de um placeholder são interpolados antes da chamada
    - Se o handler devolve o próprio vetor (auto-preservação), a resolução
      para: o valor ainda não está disponível e o vetor segue intacto
    - Caso contrário, o resultado é interpolado novamente (placeholders aninhados)
    - Chaves desconhecidas são mantidas como estão

Decisões arquiteturais:
    - A profundidade é limitada por `max_depth` (padrão 10); ao atingir zero,
      o valor corrente é devolvido como está (válvula de segurança, não erro)
    - Exceções de handlers propagam; quem chama (orquestrador/expander)
      as converte em ErrorRecord

Invariantes:
    - Um placeholder auto-preservado é um ponto fixo: interpolá-lo é no-op
    - A interpolação sempre termina

Limites explícitos:
    - Não acumula erros
    - Não conhece ações, efeitos ou interceptors
"""

from __future__ import annotations

from typing import Any, Hashable, Mapping

from atlas_dispatch.core.registry.types import PlaceholderDef

DEFAULT_MAX_DEPTH = 10


def is_placeholder(placeholders: Mapping[Hashable, PlaceholderDef], value: Any) -> bool:
    if not isinstance(value, (list, tuple)) or not value:
        return False
    try:
        return value[0] in placeholders
    except TypeError:
        return False


def _resolve(
    placeholders: Mapping[Hashable, PlaceholderDef],
    dispatch_data: Mapping[str, Any],
    placeholder: Any,
    max_depth: int,
) -> Any:
    key, *args = placeholder
    registration = placeholders[key]
    interpolated_args = [interpolate(placeholders, dispatch_data, a, max_depth - 1) for a in args]
    return registration.handler(dispatch_data, *interpolated_args)


def interpolate(
    placeholders: Mapping[Hashable, PlaceholderDef],
    dispatch_data: Mapping[str, Any],
    value: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """
    Interpola recursivamente os placeholders presentes em `value`.

    Args:
        placeholders: mapa chave → PlaceholderDef.
        dispatch_data: dados disponíveis aos handlers de placeholder.
        value: estrutura a ser interpolada.
        max_depth: profundidade máxima de resolução.

    Returns:
        Any: nova estrutura com placeholders resolvidos (inputs não são mutados).
    """
    if max_depth <= 0:
        return value

    if is_placeholder(placeholders, value):
        resolved = _resolve(placeholders, dispatch_data, value, max_depth)
        if resolved == value:
            return value
        return interpolate(placeholders, dispatch_data, resolved, max_depth - 1)

    if isinstance(value, list):
        return [interpolate(placeholders, dispatch_data, v, max_depth) for v in value]

    if isinstance(value, tuple):
        return tuple(interpolate(placeholders, dispatch_data, v, max_depth) for v in value)

    if isinstance(value, Mapping):
        return {k: interpolate(placeholders, dispatch_data, v, max_depth) for k, v in value.items()}

    return value
