"""
Both gateway modes must fail the same way for the same input.

The live gateway runs against a small httpx.MockTransport stand-in for MTN
that answers the way the sandbox does for these cases.
"""

from decimal import Decimal

import httpx
import pytest

from safaritix.integrations.clients.real_http.mtn import MTNMomoGateway
from safaritix.integrations.contracts.errors import NotFoundError, ValidationError
from safaritix.integrations.contracts.interfaces import PaymentRequest

INACTIVE_PAYER = "250700000000"
UNKNOWN_REFERENCE = "00000000-0000-4000-8000-000000000000"


async def sandbox_mtn(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/token/"):
        return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
    if "/accountholder/msisdn/" in path:
        return httpx.Response(200, json={"result": INACTIVE_PAYER not in path})
    if path.endswith(f"/requesttopay/{UNKNOWN_REFERENCE}"):
        return httpx.Response(404, json={"code": "RESOURCE_NOT_FOUND"})
    if path.endswith("/requesttopay"):
        return httpx.Response(202)
    return httpx.Response(500, text=f"unexpected {request.method} {path}")


@pytest.fixture
def live_gateway(clock):
    client = httpx.AsyncClient(transport=httpx.MockTransport(sandbox_mtn))
    return MTNMomoGateway(
        "https://sandbox.example.test/collection",
        subscription_key="sub-key",
        api_user="api-user",
        api_key="api-secret",
        http_client=client,
        clock=clock,
    )


def _request(**overrides):
    params = dict(amount=Decimal("1500"), currency="RWF", payer="250788123456", external_id="TICKET-1")
    params.update(overrides)
    return PaymentRequest(**params)


CASES = [
    ("inactive payer", lambda gw: gw.validate_account_holder(INACTIVE_PAYER), NotFoundError),
    ("inactive payer checkout", lambda gw: gw.process_payment(_request(payer=INACTIVE_PAYER)), NotFoundError),
    ("unknown reference", lambda gw: gw.check_transaction_status(UNKNOWN_REFERENCE), NotFoundError),
    ("blank reference", lambda gw: gw.check_transaction_status(""), ValidationError),
    ("zero amount", lambda gw: gw.request_to_pay(_request(amount=Decimal("0"))), ValidationError),
    ("negative amount", lambda gw: gw.request_to_pay(_request(amount=Decimal("-1"))), ValidationError),
    ("malformed payer", lambda gw: gw.validate_account_holder("not-a-number"), ValidationError),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("call, expected", [(c[1], c[2]) for c in CASES], ids=[c[0] for c in CASES])
async def test_same_error_type_in_both_modes(mock_gateway, live_gateway, call, expected):
    raised = []
    for gateway in (mock_gateway, live_gateway):
        with pytest.raises(expected) as exc_info:
            await call(gateway)
        raised.append(type(exc_info.value))

    assert raised[0] is raised[1]
