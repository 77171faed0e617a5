"""
Payment API schemas (request/response models).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CardSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credit_card: str | None = Field(default=None, alias="creditCard")
    shipment_id: str | None = Field(default=None, alias="shipmentId")


class SuccessResult(BaseModel):
    success: Literal[True] = True
    shipment_id: str


class ErrorResult(BaseModel):
    error: Literal[True] = True
    message: str
