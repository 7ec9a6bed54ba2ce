"""Tests for PriceHistoryDB storage and price series."""

import pytest

from pricebook.db.history import PriceHistoryDB, PricePoint
from pricebook.models import LineItem


@pytest.fixture
def db(tmp_path):
    """Create a temporary PriceHistoryDB."""
    history = PriceHistoryDB(db_path=tmp_path / "test.db")
    yield history
    history.close()


@pytest.fixture
def sample_items():
    return [
        LineItem(
            name="Milk",
            price_total=4.99,
            qty_value=1.0,
            qty_unit="gal",
            unit_price="1.3184 $/l",
            date="2024-03-15",
        ),
        LineItem(name="Bread", price_total=2.49, date="2024-03-15"),
        LineItem(
            name="Milk",
            price_total=3.19,
            qty_value=0.5,
            qty_unit="gal",
            unit_price="1.6856 $/l",
            date="2024-02-01",
        ),
    ]


def test_append_many(db, sample_items):
    ids = db.append_many(sample_items)
    assert len(ids) == 3
    assert all(isinstance(i, int) for i in ids)
    assert ids == sorted(ids)


def test_append_single(db):
    row_id = db.append(LineItem(name="Eggs", price_total=3.5, date="2024-03-15"))
    assert isinstance(row_id, int)
    assert [i.name for i in db.get_all()] == ["Eggs"]


def test_get_all_round_trips_fields(db, sample_items):
    db.append_many(sample_items)
    items = db.get_all()

    assert items == sample_items


def test_get_names(db, sample_items):
    db.append_many(sample_items)
    assert db.get_names() == ["Bread", "Milk"]


def test_get_names_empty(db):
    assert db.get_names() == []


def test_price_series_uses_unit_price_sorted_by_date(db, sample_items):
    """Unit price numbers are preferred and points come oldest first."""
    db.append_many(sample_items)
    points = db.get_price_series("Milk")

    assert points == [
        PricePoint(date="2024-02-01", value=1.6856, unit_price="1.6856 $/l"),
        PricePoint(date="2024-03-15", value=1.3184, unit_price="1.3184 $/l"),
    ]


def test_price_series_falls_back_to_total(db, sample_items):
    db.append_many(sample_items)
    points = db.get_price_series("Bread")

    assert points == [PricePoint(date="2024-03-15", value=2.49, unit_price=None)]


def test_price_series_skips_items_without_price(db):
    db.append(LineItem(name="Mystery", date="2024-03-15"))
    assert db.get_price_series("Mystery") == []


def test_price_series_unknown_name(db, sample_items):
    db.append_many(sample_items)
    assert db.get_price_series("Coffee") == []


def test_persists_across_connections(tmp_path, sample_items):
    path = tmp_path / "test.db"
    first = PriceHistoryDB(db_path=path)
    first.append_many(sample_items)
    first.close()

    second = PriceHistoryDB(db_path=path)
    try:
        assert len(second.get_all()) == 3
    finally:
        second.close()
