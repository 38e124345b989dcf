from decimal import Decimal

import pytest

from safaritix.integrations.contracts.errors import (
    GatewayError,
    ProtocolError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from safaritix.integrations.contracts.interfaces import PaymentRequest, TransactionStatus
from safaritix.integrations.contracts.payments import (
    ensure_valid_payer,
    ensure_valid_reference_id,
    ensure_valid_payment_request,
    is_terminal_status,
    mask_phone_number,
    normalize_phone_number,
    payee_note_for,
    payer_message_for,
    validate_payment_request,
)


def _request(**overrides):
    params = dict(amount=Decimal("2500"), currency="RWF", payer="250788123456", external_id="BK-1")
    params.update(overrides)
    return PaymentRequest(**params)


def test_normalize_phone_number():
    assert normalize_phone_number("+250 788 123 456") == "250788123456"
    assert normalize_phone_number("250788123456") == "250788123456"
    assert normalize_phone_number(None) == ""


def test_mask_phone_number_keeps_last_four_digits():
    assert mask_phone_number("+250788123456") == "***3456"


def test_valid_request_has_no_errors():
    assert validate_payment_request(_request()) == []
    ensure_valid_payment_request(_request())


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"amount": Decimal("0")}, "amount must be greater than zero"),
        ({"amount": Decimal("-1")}, "amount must be greater than zero"),
        ({"amount": Decimal("NaN")}, "amount must be greater than zero"),
        ({"amount": "ten"}, "amount 'ten' is not a number"),
        ({"currency": " "}, "currency is required"),
        ({"external_id": ""}, "external_id is required"),
        ({"payer": ""}, "payer phone number is required"),
        ({"payer": "0788-123-456"}, "payer '0788-123-456' must contain digits only"),
    ],
)
def test_validation_errors(overrides, expected):
    assert expected in validate_payment_request(_request(**overrides))


def test_ensure_valid_payment_request_lists_all_errors():
    with pytest.raises(ValidationError) as exc_info:
        ensure_valid_payment_request(_request(amount=Decimal("0"), currency=""))
    assert exc_info.value.details["errors"] == ["amount must be greater than zero", "currency is required"]


def test_ensure_valid_payer():
    assert ensure_valid_payer("+250 788 123 456") == "250788123456"
    with pytest.raises(ValidationError):
        ensure_valid_payer("abc")


def test_default_messages():
    request = _request()
    assert payer_message_for(request) == "SafariTix Bus Ticket Payment"
    assert payee_note_for(request) == "Payment for ticket BK-1"
    assert payee_note_for(_request(payee_note="custom")) == "custom"


def test_terminal_statuses():
    assert is_terminal_status(TransactionStatus.SUCCESSFUL)
    assert is_terminal_status(TransactionStatus.FAILED)
    assert not is_terminal_status(TransactionStatus.PENDING)


def test_error_hierarchy_and_payload():
    err = ProtocolError("bad body", details={"status_code": 200})
    assert isinstance(err, UpstreamError)
    assert isinstance(UpstreamTimeoutError("slow"), UpstreamError)
    assert isinstance(err, GatewayError)
    assert err.to_dict() == {"error_code": "protocol_error", "message": "bad body", "details": {"status_code": 200}}
    assert str(err) == "bad body"


def test_ensure_valid_reference_id():
    assert ensure_valid_reference_id(" ref-1 ") == "ref-1"
    for blank in ("", "   ", None):
        with pytest.raises(ValidationError):
            ensure_valid_reference_id(blank)
