import pytest

from payments import security


class TestMaskCardNumber:
    def test_keeps_last_four(self):
        assert security.mask_card_number("4111111111111111") == "XXXX-XXXX-XXXX-1111"

    def test_depends_only_on_tail(self):
        assert security.mask_card_number("0000000000004242") == security.mask_card_number("99994242")

    @pytest.mark.parametrize(
        "card_number, expected",
        [("123", "XXXX-XXXX-XXXX-123"), ("9", "XXXX-XXXX-XXXX-9"), ("", "XXXX-XXXX-XXXX-")],
    )
    def test_short_values(self, card_number, expected):
        assert security.mask_card_number(card_number) == expected


class TestParseShipmentId:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("123", 123),
            ("-7", -7),
            ("+7", 7),
            ("007", 7),
            ("9223372036854775807", 9223372036854775807),
            ("-9223372036854775808", -9223372036854775808),
        ],
    )
    def test_valid(self, raw, expected):
        assert security.parse_shipment_id(raw) == expected

    @pytest.mark.parametrize("raw", ["", "-", "1e3", "12a", "1 OR 1=1", "\t5", "-9223372036854775809"])
    def test_invalid(self, raw):
        with pytest.raises(security.InvalidFormatError) as exc_info:
            security.parse_shipment_id(raw)
        assert str(exc_info.value) == security.INVALID_SHIPMENT_ID_MESSAGE

    def test_errors_are_value_errors(self):
        assert issubclass(security.MissingParameterError, ValueError)
        assert str(security.MissingParameterError()) == security.MISSING_PARAMETERS_MESSAGE
