"""Append-only line item store and per-product price history."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from ..models import LineItem
from ..parsing.units import unit_price_value
from .schema import ensure_schema


@dataclass(frozen=True)
class PricePoint:
    date: str
    value: float
    unit_price: str | None = None


class PriceHistoryDB:
    """Manages the line_items table."""

    def __init__(self, db_path: str | Path = "~/.config/pricebook/history.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def append(self, item: LineItem) -> int:
        """Insert one item and return its row ID."""
        return self.append_many([item])[0]

    def append_many(self, items: list[LineItem]) -> list[int]:
        conn = self._get_conn()
        ids: list[int] = []
        for item in items:
            cur = conn.execute(
                """INSERT INTO line_items
                   (name, price_total, qty_value, qty_unit, unit_price, date)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    item.name,
                    item.price_total,
                    item.qty_value,
                    item.qty_unit,
                    item.unit_price,
                    item.date,
                ),
            )
            ids.append(cur.lastrowid)
        conn.commit()
        return ids

    def get_all(self) -> list[LineItem]:
        """Return every stored item in insertion order."""
        conn = self._get_conn()
        rows = conn.execute("SELECT * FROM line_items ORDER BY id").fetchall()
        return [_row_to_item(r) for r in rows]

    def get_names(self) -> list[str]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT DISTINCT name FROM line_items ORDER BY name"
        ).fetchall()
        return [r["name"] for r in rows]

    def get_price_series(self, name: str) -> list[PricePoint]:
        """Price points for one product, oldest first.

        The unit price is used when known so that different pack sizes stay
        comparable; otherwise the line total.
        """
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM line_items WHERE name = ? ORDER BY date, id",
            (name,),
        ).fetchall()
        points: list[PricePoint] = []
        for row in rows:
            value = unit_price_value(row["unit_price"])
            if value is None:
                value = row["price_total"]
            if value is None:
                continue
            points.append(
                PricePoint(date=row["date"], value=value, unit_price=row["unit_price"])
            )
        return points


def _row_to_item(row: sqlite3.Row) -> LineItem:
    return LineItem(
        name=row["name"],
        price_total=row["price_total"],
        qty_value=row["qty_value"],
        qty_unit=row["qty_unit"],
        unit_price=row["unit_price"],
        date=row["date"],
    )
