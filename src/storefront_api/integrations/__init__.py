"""Integrations module - Third-party services (payment gateway)."""

from storefront_api.integrations.circuit_breaker import CircuitBreaker
from storefront_api.integrations.payment import PaymentGateway

__all__ = ["CircuitBreaker", "PaymentGateway"]
