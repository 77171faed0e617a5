"""
Payment persistence (raw SQL).

Statement text is fixed; only bound values vary.
"""

from __future__ import annotations

from typing import Any, Protocol

CREATE_CREDIT_CARD_TABLE = """
CREATE TABLE IF NOT EXISTS credit_card (
  id BIGSERIAL PRIMARY KEY,
  card_number TEXT NOT NULL,
  shipment_id BIGINT NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

INSERT_CREDIT_CARD = "INSERT INTO credit_card (card_number, shipment_id) VALUES (?, ?)"

UPDATE_SHIPMENT_CREDIT_CARD = "UPDATE shipment SET credit_card = ? WHERE id = ?"


class StatementRunner(Protocol):
    async def execute(self, sql: str, *args: Any) -> None: ...

    async def update(self, sql: str, *args: Any) -> int: ...


async def ensure_credit_card_table(cards: StatementRunner) -> None:
    await cards.execute(CREATE_CREDIT_CARD_TABLE)


async def insert_credit_card(cards: StatementRunner, *, card_number: str, shipment_id: int) -> int:
    return await cards.update(INSERT_CREDIT_CARD, card_number, shipment_id)


async def update_shipment_credit_card(
    shipments: StatementRunner,
    *,
    masked_card: str,
    shipment_id: int,
) -> int:
    return await shipments.update(UPDATE_SHIPMENT_CREDIT_CARD, masked_card, shipment_id)
