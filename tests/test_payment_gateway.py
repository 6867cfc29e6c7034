import asyncio
import json

import httpx
import pytest

from storefront_api.core.errors import PaymentInitiationError
from storefront_api.integrations.circuit_breaker import STATE_HALF_OPEN, STATE_OPEN, CircuitBreaker
from storefront_api.integrations.payment import PaymentGateway

CHECKOUT = dict(amount=25.0, first_name="Chris", last_name="Banda", email="c@example.com", tx_ref="17")


def _gateway(handler, breaker=None) -> PaymentGateway:
    return PaymentGateway(
        base_url="https://payments.example",
        secret_key="sk-test",
        currency="MWK",
        callback_url="https://shop.example/callback",
        return_url="https://shop.example/return",
        breaker=breaker,
        transport=httpx.MockTransport(handler),
    )


def _checkout(gateway: PaymentGateway) -> str:
    async def run():
        try:
            return await gateway.create_checkout(**CHECKOUT)
        finally:
            await gateway.close()

    return asyncio.run(run())


def test_returns_checkout_url() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "status": "success",
                "message": "Hosted payment session generated",
                "data": {"checkout_url": "https://checkout.example/abc", "tx_ref": "17"},
            },
        )

    assert _checkout(_gateway(handler)) == "https://checkout.example/abc"

    assert seen["url"] == "https://payments.example/payment"
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert body["amount"] == 25.0
    assert body["currency"] == "MWK"
    assert body["tx_ref"] == "17"
    assert body["first_name"] == "Chris"
    assert body["callback_url"] == "https://shop.example/callback"
    assert body["customization"] == {"title": "Order Payment", "description": "Payment for order"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(502, text="bad gateway"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"status": "failed", "message": "Invalid key", "data": None}),
    ],
)
def test_failed_checkout(response) -> None:
    gateway = _gateway(lambda request: response)

    with pytest.raises(PaymentInitiationError):
        _checkout(gateway)
    assert gateway.breaker.failure_count == 1


def test_timeout() -> None:
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(PaymentInitiationError):
        _checkout(_gateway(handler))


def test_cancelled_trial_call_does_not_lock_circuit() -> None:
    now = [1000.0]
    breaker = CircuitBreaker("payment-gateway", threshold=1, timeout=30, clock=lambda: now[0])
    breaker.record_failure()
    now[0] += 30

    started = {}

    async def slow_handler(request):
        started["event"].set()
        await asyncio.sleep(10)
        return httpx.Response(200, json={"data": {"checkout_url": "https://late.example"}})

    gateway = _gateway(slow_handler, breaker=breaker)

    async def run():
        started["event"] = asyncio.Event()
        task = asyncio.create_task(gateway.create_checkout(**CHECKOUT))
        await started["event"].wait()
        assert breaker.state == STATE_HALF_OPEN

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await gateway.close()

    asyncio.run(run())

    assert breaker.state == STATE_OPEN
    now[0] += 30
    assert breaker.allow_request()


def test_open_circuit_fails_fast() -> None:
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    breaker = CircuitBreaker("payment-gateway", threshold=2, timeout=60)
    for _ in range(2):
        with pytest.raises(PaymentInitiationError):
            _checkout(_gateway(handler, breaker=breaker))
    assert breaker.state == STATE_OPEN

    with pytest.raises(PaymentInitiationError):
        _checkout(_gateway(handler, breaker=breaker))
    assert len(calls) == 2
