import pytest

from storefront_api.core.errors import BadRequestError
from storefront_api.services.order_queries import parse_page, parse_store_param


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (None, None, (20, 0)),
        ("5", "10", (5, 10)),
        ("abc", "-1", (20, 0)),
        (str(10**30), "²", (20, 0)),
        ("2147483647", "2147483648", (2147483647, 0)),
    ],
)
def test_parse_page(limit, offset, expected) -> None:
    assert parse_page(limit, offset) == expected


def test_parse_store_param() -> None:
    assert parse_store_param("5") == 5
    assert parse_store_param("online", allow_online=True) == "online"


@pytest.mark.parametrize("raw", ["online", "²", "٣", "-1", "5a", str(10**30)])
def test_parse_store_param_rejects_invalid_ids(raw) -> None:
    with pytest.raises(BadRequestError) as exc_info:
        parse_store_param(raw)
    assert exc_info.value.message == "Invalid store ID"


def test_parse_store_param_requires_value() -> None:
    with pytest.raises(BadRequestError) as exc_info:
        parse_store_param(None, allow_online=True)
    assert exc_info.value.message == "Provide store param from URL query"
