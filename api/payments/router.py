"""
Payment API endpoints.

Responses are a single-element list holding one result object.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from core import db

from . import schemas, service

logger = logging.getLogger(__name__)

STORAGE_FAILURE_MESSAGE = "Payment record could not be stored."

router = APIRouter()


def get_handler() -> service.PaymentRecordHandler:
    return service.default_handler()


async def _store_card(
    submission: schemas.CardSubmission,
    handler: service.PaymentRecordHandler,
) -> JSONResponse:
    try:
        result = await handler.handle(submission.credit_card, submission.shipment_id)
    except db.StorageError:
        logger.exception("card_record_failed shipment_id=%s", submission.shipment_id)
        body = schemas.ErrorResult(message=STORAGE_FAILURE_MESSAGE).model_dump()
        return JSONResponse(status_code=503, content=[body])

    status_code = 400 if result.get("error") else 200
    return JSONResponse(status_code=status_code, content=[result])


@router.post("/payments/card")
async def store_card(
    credit_card: str | None = Query(default=None, alias="creditCard"),
    shipment_id: str | None = Query(default=None, alias="shipmentId"),
    handler: service.PaymentRecordHandler = Depends(get_handler),
) -> JSONResponse:
    """
    Store a card for a shipment and write its masked form onto the shipment.
    """
    submission = schemas.CardSubmission(credit_card=credit_card, shipment_id=shipment_id)
    return await _store_card(submission, handler)
