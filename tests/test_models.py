"""Tests for LineItem."""

import dataclasses
from datetime import date

import pytest

from pricebook.models import SENTINEL_NAME, LineItem, unparsed_item


def test_to_dict_keys():
    item = LineItem(
        name="BREAD",
        price_total=2.49,
        qty_value=1.0,
        qty_unit="ct",
        unit_price="2.49 $/ct",
        date="2024-03-02",
    )
    assert item.to_dict() == {
        "name": "BREAD",
        "priceTotal": 2.49,
        "qtyValue": 1.0,
        "qtyUnit": "ct",
        "unitPrice": "2.49 $/ct",
        "date": "2024-03-02",
    }


def test_line_items_are_immutable():
    item = LineItem(name="BREAD")
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.name = "MILK"


def test_unparsed_item_defaults_to_today():
    item = unparsed_item()
    assert item.name == SENTINEL_NAME
    assert item.is_sentinel
    assert item.date == date.today().isoformat()


def test_unparsed_item_with_date():
    assert unparsed_item("2024-01-01").date == "2024-01-01"
