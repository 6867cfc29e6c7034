"""Core module - Logging, error monitoring, domain errors and validation."""

from storefront_api.core.logger import setup_logger
from storefront_api.core.monitoring import capture_exception, set_order_context

__all__ = ["setup_logger", "capture_exception", "set_order_context"]
