# src/atlas_dispatch/core/config/hashing.py
"""
Hashing canônico de configuração do Atlas Dispatch.

O hash representa a identidade estrutural da configuração efetiva e é
registrado no event log de dispatch para rastreabilidade.

Decisões arquiteturais:
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - SHA-256 como algoritmo estável

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """Calcula o SHA-256 da serialização JSON canônica de `config`."""
    canonical = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
