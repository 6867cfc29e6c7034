import pytest
from pydantic import ValidationError

from storefront_api.core.validation import (
    FieldViolation,
    ViolationKind,
    field_path,
    render_violation,
    render_violations,
    violations_from_errors,
)
from storefront_api.models.order import CreateStoreOrderRequest


def _violations(payload):
    with pytest.raises(ValidationError) as exc_info:
        CreateStoreOrderRequest(**payload)
    return violations_from_errors(exc_info.value.errors())


def test_field_path_skips_location_root() -> None:
    assert field_path(("body", "items", 0, "quantity")) == "items[0].quantity"
    assert field_path(("store_id",)) == "store_id"
    assert field_path(("body",)) == ""


def test_empty_items() -> None:
    violations = _violations({"store_id": 5, "items": []})
    assert violations == [FieldViolation("items", ViolationKind.EMPTY, 1)]
    assert render_violations(violations) == "Please add items"


def test_item_rules() -> None:
    violations = _violations(
        {"store_id": 5, "items": [{"sku": "", "quantity": 0, "price": 0}]}
    )
    assert render_violations(violations) == (
        "items[0].sku is a required field; "
        "items[0].quantity should be at least 1; "
        "items[0].price should be greater than 0"
    )


def test_missing_store_id() -> None:
    violations = _violations({"items": [{"sku": "A1", "quantity": 1, "price": 1.0}]})
    assert violations == [FieldViolation("store_id", ViolationKind.REQUIRED)]


@pytest.mark.parametrize(
    "violation, message",
    [
        (FieldViolation("", ViolationKind.REQUIRED), "Invalid request body"),
        (FieldViolation("items", ViolationKind.MALFORMED), "Invalid request body"),
        (FieldViolation("store_id", ViolationKind.INVALID), "store_id provided is invalid"),
        (FieldViolation("price", ViolationKind.GT, 0.0), "price should be greater than 0"),
        (FieldViolation("price", ViolationKind.GT, 0.5), "price should be greater than 0.5"),
        (FieldViolation("quantity", ViolationKind.GTE, 1), "quantity should be at least 1"),
    ],
)
def test_render_violation(violation, message) -> None:
    assert render_violation(violation) == message


def test_render_violations_deduplicates() -> None:
    violations = [
        FieldViolation("", ViolationKind.MALFORMED),
        FieldViolation("", ViolationKind.MALFORMED),
    ]
    assert render_violations(violations) == "Invalid request body"
