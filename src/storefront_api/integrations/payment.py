"""Payment gateway client for online order checkout."""

from typing import Optional

import httpx
from pydantic import ValidationError

from storefront_api.config.settings import Settings
from storefront_api.core.errors import PaymentInitiationError
from storefront_api.core.logger import setup_logger
from storefront_api.integrations.circuit_breaker import CircuitBreaker
from storefront_api.models.payment import PaymentCustomization, PaymentRequest, PaymentResponse

logger = setup_logger(__name__)

PAYMENT_PATH = "/payment"


class PaymentGateway:
    """Async HTTP client creating hosted checkout sessions.

    Every call is bounded by the client timeout and guarded by a circuit
    breaker.
    """

    def __init__(
        self,
        base_url: str,
        secret_key: Optional[str],
        currency: str,
        callback_url: str,
        return_url: str,
        title: str = "Order Payment",
        description: str = "Payment for order",
        timeout: float = 10.0,
        breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize gateway client with credentials and checkout settings."""
        self.currency = currency
        self.callback_url = callback_url
        self.return_url = return_url
        self.title = title
        self.description = description
        self.breaker = breaker or CircuitBreaker("payment-gateway")

        headers = {"Accept": "application/json"}
        if secret_key:
            headers["Authorization"] = f"Bearer {secret_key}"

        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "PaymentGateway":
        """Build a gateway from application settings."""
        return cls(
            base_url=settings.payment_base_url,
            secret_key=settings.payment_secret_key,
            currency=settings.payment_currency,
            callback_url=settings.payment_callback_url,
            return_url=settings.payment_return_url,
            title=settings.payment_title,
            description=settings.payment_description,
            timeout=settings.payment_timeout_seconds,
            breaker=CircuitBreaker(
                "payment-gateway",
                threshold=settings.payment_breaker_threshold,
                timeout=settings.payment_breaker_timeout,
            ),
            transport=transport,
        )

    async def create_checkout(
        self,
        *,
        amount: float,
        first_name: str,
        last_name: str,
        email: str,
        tx_ref: str,
    ) -> str:
        """
        Create a checkout session and return its URL.

        Args:
            amount: Order total to charge
            first_name: Customer first name
            last_name: Customer last name
            email: Customer email
            tx_ref: External transaction reference (the order id)

        Returns:
            Hosted checkout URL

        Raises:
            PaymentInitiationError: Circuit open, HTTP error, timeout or
                a response without a checkout URL
        """
        if not self.breaker.allow_request():
            logger.error(f"Payment gateway circuit open, refusing checkout for tx_ref={tx_ref}")
            raise PaymentInitiationError()

        request = PaymentRequest(
            amount=amount,
            currency=self.currency,
            first_name=first_name,
            last_name=last_name,
            email=email,
            callback_url=self.callback_url,
            return_url=self.return_url,
            tx_ref=tx_ref,
            customization=PaymentCustomization(title=self.title, description=self.description),
            meta={"tx_ref": tx_ref},
        )

        try:
            logger.info(f"Initiating payment for tx_ref={tx_ref} amount={amount} {self.currency}")
            response = await self.client.post(PAYMENT_PATH, json=request.model_dump())
            response.raise_for_status()
            payload = PaymentResponse(**response.json())

        except httpx.HTTPStatusError as e:
            self.breaker.record_failure()
            logger.error(
                f"Payment gateway HTTP error: {e.response.status_code} - {e.response.text}"
            )
            raise PaymentInitiationError() from e

        except httpx.TimeoutException as e:
            self.breaker.record_failure()
            logger.error(f"Timeout initiating payment for tx_ref={tx_ref}")
            raise PaymentInitiationError() from e

        except httpx.HTTPError as e:
            self.breaker.record_failure()
            logger.error(f"Payment gateway transport error: {e}")
            raise PaymentInitiationError() from e

        except (ValueError, ValidationError) as e:
            self.breaker.record_failure()
            logger.error(f"Unreadable payment gateway response: {e}")
            raise PaymentInitiationError() from e

        except BaseException:
            # Cancelled or interrupted: a half-open trial must still settle the circuit
            self.breaker.record_failure()
            logger.warning(f"Payment call for tx_ref={tx_ref} interrupted")
            raise

        if payload.data is None or not payload.data.checkout_url:
            self.breaker.record_failure()
            logger.error(f"Payment gateway returned no checkout URL: {payload.message}")
            raise PaymentInitiationError()

        self.breaker.record_success()
        logger.info(f"Checkout session created for tx_ref={tx_ref}")
        return payload.data.checkout_url

    async def close(self) -> None:
        """Close HTTP client connection."""
        await self.client.aclose()
