"""
GlitchTip Error Monitoring Utilities

Helper functions for error tracking and context management.
"""

from typing import Any, Dict, Optional

import sentry_sdk

from storefront_api.core.logger import setup_logger

logger = setup_logger(__name__)


def set_order_context(
    channel: str,
    order_id: Optional[int] = None,
    order_number: Optional[str] = None,
    **extra_tags
) -> None:
    """
    Set order-specific context for error tracking.

    Args:
        channel: Order channel ("online" or "in-store")
        order_id: Internal order identity
        order_number: Human-facing order number
        **extra_tags: Additional tags to add
    """
    try:
        sentry_sdk.set_tag("order.channel", channel)
        if order_id:
            sentry_sdk.set_tag("order.id", order_id)
        if order_number:
            sentry_sdk.set_tag("order.number", order_number)

        for key, value in extra_tags.items():
            sentry_sdk.set_tag(key, value)

        context_data = {
            "channel": channel,
            "order_id": order_id,
            "order_number": order_number,
        }
        context_data.update(extra_tags)
        sentry_sdk.set_context("order", context_data)

    except Exception as e:
        logger.warning(f"Failed to set order context: {e}")


def capture_exception(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error"
) -> None:
    """
    Capture an exception and send to GlitchTip.

    The SDK is a no-op when no DSN was configured.

    Args:
        error: The exception to capture
        context: Additional context data
        level: Error level (error, warning, info)
    """
    try:
        if context:
            with sentry_sdk.new_scope() as scope:
                scope.set_context("custom", context)
                scope.level = level
                sentry_sdk.capture_exception(error)
        else:
            sentry_sdk.capture_exception(error)

    except Exception as e:
        logger.warning(f"Failed to capture exception in GlitchTip: {e}")
