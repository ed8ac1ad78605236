"""Registry de exemplo (pedidos) usado pelos testes E2E.

Sistema esperado: `{"db": dict, "outbox": list}`.
"""

from __future__ import annotations

from typing import Any, Dict, List


def _db_put(ctx, system, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    system["db"].setdefault(table, []).append(row)
    return row


def _mail_send(ctx, system, to: str, subject: str) -> str:
    if not to:
        raise ValueError("missing recipient")
    system["outbox"].append({"to": to, "subject": subject})
    return to


def _payment_charge(ctx, system, order_id: str, amount: float, continuation: List[Any]):
    # confirmação síncrona: o resultado fica disponível à continuação
    receipt = {"order_id": order_id, "amount": amount, "status": "paid"}
    return ctx.dispatch({"receipt": receipt}, continuation)


def _place_order(state, order_id: str, email: str, amount: float):
    if order_id in state["existing"]:
        return [["mail/send", email, f"Order {order_id} already exists"]]
    return [
        ["db/put", "orders", {"id": order_id, "email": email, "amount": amount}],
        [
            "payment/charge",
            order_id,
            amount,
            [
                ["db/put", "receipts", ["ctx/receipt"]],
                ["mail/send", email, ["str/format", "Paid {}", ["ctx/receipt", "amount"]]],
            ],
        ],
    ]


def _receipt(dispatch_data, *path):
    if "receipt" not in dispatch_data:
        return ["ctx/receipt", *path]
    value = dispatch_data["receipt"]
    for key in path:
        value = value[key]
    return value


def _format(dispatch_data, template, *args):
    # enquanto algum argumento ainda é placeholder, preserva o vetor
    if any(isinstance(a, list) for a in args):
        return ["str/format", template, *args]
    return template.format(*args)


def orders_registry(existing=()):
    return {
        "system_to_state": lambda system: {"existing": {o["id"] for o in system["db"].get("orders", [])} | set(existing)},
        "effects": {
            "db/put": {"handler": _db_put, "description": "Insert a row", "system_keys": ["db"]},
            "mail/send": {"handler": _mail_send, "description": "Send an e-mail", "system_keys": ["outbox"]},
            "payment/charge": {"handler": _payment_charge, "description": "Charge and continue"},
        },
        "actions": {
            "order/place": {"handler": _place_order, "description": "Place an order"},
        },
        "placeholders": {
            "ctx/receipt": {"handler": _receipt, "description": "Payment receipt"},
            "str/format": {"handler": _format, "description": "Format a string"},
        },
    }
