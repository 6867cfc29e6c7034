import pytest

from storefront_api.core.errors import InvalidStatusTransition
from storefront_api.services.order_status import ensure_transition


def test_pending_can_complete_or_cancel() -> None:
    assert ensure_transition("pending", "completed") is True
    assert ensure_transition("pending", "canceled") is True


def test_same_status_is_noop() -> None:
    assert ensure_transition("completed", "completed") is False
    assert ensure_transition("canceled", "canceled") is False


@pytest.mark.parametrize(
    "current, target",
    [("completed", "canceled"), ("canceled", "completed"), ("completed", "pending")],
)
def test_terminal_statuses(current, target) -> None:
    with pytest.raises(InvalidStatusTransition) as exc_info:
        ensure_transition(current, target)
    assert exc_info.value.status_code == 409
    assert str(exc_info.value) == f"Cannot move order from {current} to {target}"
