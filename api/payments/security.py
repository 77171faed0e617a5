"""
Input validation and card masking helpers.
"""

from __future__ import annotations

import re

MISSING_PARAMETERS_MESSAGE = "Both creditCard and shipmentId parameters are required"
INVALID_SHIPMENT_ID_MESSAGE = "Invalid shipment ID format. Must be a valid number."

MASK_PREFIX = "XXXX-XXXX-XXXX-"

# shipment.id / credit_card.shipment_id are BIGINT columns.
BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1

# ASCII digits only: int() alone would also accept whitespace, "_" and non-ASCII digits.
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class SubmissionError(ValueError):
    pass


class MissingParameterError(SubmissionError):
    def __init__(self) -> None:
        super().__init__(MISSING_PARAMETERS_MESSAGE)


class InvalidFormatError(SubmissionError):
    def __init__(self) -> None:
        super().__init__(INVALID_SHIPMENT_ID_MESSAGE)


def parse_shipment_id(raw: str) -> int:
    if _INTEGER_RE.fullmatch(raw or "") is None:
        raise InvalidFormatError()
    value = int(raw)
    if not BIGINT_MIN <= value <= BIGINT_MAX:
        raise InvalidFormatError()
    return value


def mask_card_number(card_number: str) -> str:
    """
    Keep only the last 4 characters. Shorter values keep whatever they have.
    """
    return MASK_PREFIX + card_number[-4:]
