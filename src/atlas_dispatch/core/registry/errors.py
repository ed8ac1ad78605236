"""
Exceções canônicas da camada de registry do Atlas Dispatch.

Estas exceções representam **violações estruturais** detectadas durante a
resolução, conversão ou mescla de registries. Ocorrem sempre em tempo de
construção, antes de qualquer dispatch; por isso, ao contrário das falhas
de dispatch, são levantadas e não acumuladas.

Invariantes:
    - Todas as exceções de registry herdam de `RegistryError`
    - Nenhuma exceção representa falha de handler durante dispatch
"""


class RegistryError(Exception):
    """
    Exceção base para erros relacionados à construção de registries.

    Limites explícitos:
        - Não representa erro de execução de efeito ou ação
        - Nunca é levantada de dentro de `dispatch`
    """


class InvalidRegistrySpecError(RegistryError):
    """
    Exceção levantada quando uma especificação de registry não pode ser resolvida.

    Especificações válidas:
        - Registry ou mapa (dict) com as chaves canônicas
        - função sem argumentos que produz um registry
        - lista/tupla `[produtor, *args]`

    Também é levantada para chaves desconhecidas no mapa de registry ou
    definições sem `handler` chamável.
    """


class RegistryKeyCollisionError(RegistryError):
    """
    Exceção levantada quando uma mesma chave é registrada como efeito e como ação.

    Decisões arquiteturais:
        - O comportamento de dispatch para chaves ambíguas seria indefinido
        - Em vez de escolher uma precedência silenciosa, o registry é rejeitado

    Invariantes:
        - Nenhum Registry construído contém chaves em `effects` e `actions` ao mesmo tempo
    """
