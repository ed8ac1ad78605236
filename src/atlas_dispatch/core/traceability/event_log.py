# src/atlas_dispatch/core/traceability/event_log.py
"""
Event Log de dispatch — rastreabilidade estruturada do Atlas Dispatch.

O Atlas Dispatch não mantém logger global: a observabilidade é feita por
eventos explícitos, registrados em um `DispatchEventLog` por meio de um
interceptor de rastreamento (`tracing_interceptor`).

Eventos emitidos pelo interceptor:
    - dispatch_started / dispatch_finished
    - action_started / action_expanded
    - effect_started / effect_finished / effect_failed

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente (o interceptor é opt-in)
    - A ordem do Event Log reflete a ordem real de execução
    - O Event Log é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico
    - Chaves de operação não serializáveis são registradas via `repr`

Invariantes:
    - `events` é sempre uma lista ordenada
    - Cada evento possui `event`, `level` e `timestamp`
    - Os hooks de rastreamento nunca alteram o contexto recebido

Limites explícitos:
    - Não decide políticas de execução (fail-fast, halt)
    - Não persiste automaticamente
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Hashable, List, Mapping, Optional, Union

from atlas_dispatch.core.config.hashing import compute_config_hash
from atlas_dispatch.core.config.loader import DispatchConfig
from atlas_dispatch.core.registry.registry import operation_key
from atlas_dispatch.core.registry.types import Interceptor

TRACING_ID = "atlas_dispatch/tracing"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _key_to_data(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return repr(key)


@dataclass
class DispatchEventLog:
    """
    Registro ordenado dos eventos de um ou mais dispatches.

    Campos:
        - dispatch_id: identificador do log (uuid4 hex por padrão)
        - started_at: timestamp ISO (UTC) de criação
        - config_hash: hash da configuração efetiva, quando conhecida
        - events: eventos na ordem em que foram registrados
    """
    dispatch_id: str
    started_at: str
    config_hash: Optional[str] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    def add_event(self, event: str, level: str = "INFO", **extra: Any) -> None:
        entry: Dict[str, Any] = {
            "dispatch_id": self.dispatch_id,
            "event": event,
            "level": level,
            "timestamp": _now_iso(),
        }
        entry.update(extra)
        self.events.append(entry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dispatch_id": self.dispatch_id,
            "started_at": self.started_at,
            "config_hash": self.config_hash,
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DispatchEventLog":
        return cls(
            dispatch_id=str(data.get("dispatch_id", "")),
            started_at=str(data.get("started_at", "")),
            config_hash=data.get("config_hash"),
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def _config_hash(config: Any) -> Optional[str]:
    if config is None:
        return None
    if isinstance(config, DispatchConfig):
        return config.config_hash
    return compute_config_hash(dict(config))


def create_event_log(
    *,
    dispatch_id: Optional[str] = None,
    config: Optional[Union[DispatchConfig, Mapping[str, Any]]] = None,
    started_at: Optional[datetime] = None,
) -> DispatchEventLog:
    """
    Cria um Event Log vazio.

    Quando `config` é informada, seu hash canônico é registrado em
    `config_hash` (um `DispatchConfig` já traz o hash calculado).
    Timestamps timezone-naive são assumidos como UTC.
    """
    if started_at is None:
        started_at = datetime.now(timezone.utc)
    elif started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=timezone.utc)

    return DispatchEventLog(
        dispatch_id=dispatch_id or uuid.uuid4().hex,
        started_at=started_at.astimezone(timezone.utc).isoformat(),
        config_hash=_config_hash(config),
    )


def save_event_log(event_log: Union[DispatchEventLog, Dict[str, Any]], path: Path) -> None:
    """
    Persiste o Event Log em JSON determinístico (chaves ordenadas).

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
        TypeError: Se algum evento contiver valores não serializáveis.
    """
    data = event_log.to_dict() if isinstance(event_log, DispatchEventLog) else event_log
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_event_log(path: Path) -> DispatchEventLog:
    data = json.loads(path.read_text(encoding="utf-8"))
    return DispatchEventLog.from_dict(data)


# =============================================================================
# Interceptor de rastreamento
# =============================================================================

def tracing_interceptor(event_log: DispatchEventLog, *, id: Hashable = TRACING_ID) -> Interceptor:
    """
    Constrói um interceptor que registra o ciclo de vida do dispatch em `event_log`.

    Os hooks apenas observam: devolvem sempre o contexto recebido.
    Dispatches aninhados (continuação) são registrados no mesmo log.
    """

    def before_dispatch(ctx):
        event_log.add_event("dispatch_started", operations=len(ctx.actions))
        return ctx

    def after_dispatch(ctx):
        event_log.add_event(
            "dispatch_finished",
            level="ERROR" if ctx.errors else "INFO",
            results=len(ctx.results),
            errors=len(ctx.errors),
            halted=ctx.halted,
        )
        return ctx

    def before_action(ctx):
        event_log.add_event("action_started", key=_key_to_data(operation_key(ctx.action)))
        return ctx

    def after_action(ctx):
        event_log.add_event(
            "action_expanded",
            key=_key_to_data(operation_key(ctx.action)),
            produced=len(ctx.actions),
        )
        return ctx

    def before_effect(ctx):
        event_log.add_event("effect_started", key=_key_to_data(operation_key(ctx.effect)))
        return ctx

    def after_effect(ctx):
        key = _key_to_data(operation_key(ctx.effect))
        if ctx.result is not None:
            event_log.add_event("effect_finished", key=key)
        else:
            event_log.add_event(
                "effect_failed",
                level="ERROR",
                key=key,
                error_type=ctx.errors[-1].type if ctx.errors else None,
                halted=ctx.halted,
            )
        return ctx

    return Interceptor(
        id=id,
        before_dispatch=before_dispatch,
        after_dispatch=after_dispatch,
        before_action=before_action,
        after_action=after_action,
        before_effect=before_effect,
        after_effect=after_effect,
    )
