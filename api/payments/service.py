"""
Payment record business logic.

Flow per submission:
- validate presence of both values, then the shipment id format
- ensure the credit_card table exists
- insert the card record into the card-data store
- write the masked card onto the shipment row in the operations store

Validation failures come back as `{"error": True, "message": ...}`.
Storage failures are raised as `core.db.StorageError`.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from core import db

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def atomic_writes_enabled() -> bool:
    return os.environ.get("PAYMENT_ATOMIC_WRITES", "1").strip() not in {"0", "false", "False"}


def _success(shipment_id: str) -> dict[str, Any]:
    return schemas.SuccessResult(shipment_id=shipment_id).model_dump()


def _error(message: str) -> dict[str, Any]:
    return schemas.ErrorResult(message=message).model_dump()


def validate_submission(card_number: str | None, shipment_id: str | None) -> int:
    """
    Return the parsed shipment id or raise a `SubmissionError`.
    """
    if card_number is None or shipment_id is None:
        raise security.MissingParameterError()
    return security.parse_shipment_id(shipment_id)


class PaymentRecordHandler:
    def __init__(
        self,
        *,
        card_store: db.Store,
        operations_store: repository.StatementRunner,
        atomic: bool = True,
    ) -> None:
        self._card_store = card_store
        self._operations_store = operations_store
        self._atomic = atomic

    async def handle(self, card_number: str | None, shipment_id: str | None) -> dict[str, Any]:
        try:
            parsed_id = validate_submission(card_number, shipment_id)
        except security.SubmissionError as exc:
            logger.info("card_submission_rejected reason=%s", type(exc).__name__)
            return _error(str(exc))

        masked = security.mask_card_number(card_number)
        if self._atomic:
            # Card insert commits only after the shipment update went through.
            async with self._card_store.transaction() as cards:
                updated = await self._write(cards, card_number, masked, parsed_id)
        else:
            updated = await self._write(self._card_store, card_number, masked, parsed_id)

        if updated == 0:
            logger.warning("shipment_not_found shipment_id=%s", parsed_id)
        logger.info(
            "card_record_stored shipment_id=%s masked=%s atomic=%s",
            parsed_id,
            masked,
            self._atomic,
        )
        return _success(shipment_id)

    async def _write(
        self,
        cards: repository.StatementRunner,
        card_number: str,
        masked: str,
        shipment_id: int,
    ) -> int:
        await repository.ensure_credit_card_table(cards)
        await repository.insert_credit_card(cards, card_number=card_number, shipment_id=shipment_id)
        return await repository.update_shipment_credit_card(
            self._operations_store,
            masked_card=masked,
            shipment_id=shipment_id,
        )


def default_handler() -> PaymentRecordHandler:
    return PaymentRecordHandler(
        card_store=db.card_store,
        operations_store=db.operations_store,
        atomic=atomic_writes_enabled(),
    )
