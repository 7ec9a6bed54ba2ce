"""CLI entry point for pricebook."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .extraction import ReceiptExtractor
from .fallback import create_fallback
from .models import LineItem


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pricebook",
        description="Extract line items from receipt photos and track prices over time",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="log pipeline decisions"
    )

    sub = parser.add_subparsers(dest="command")

    # parse
    parse_parser = sub.add_parser("parse", help="extract items from a receipt")
    parse_parser.add_argument(
        "--image", type=str, nargs="+", help="receipt image file(s) to OCR"
    )
    parse_parser.add_argument(
        "--text", type=str, default=None, metavar="FILE",
        help="read OCR text from a file ('-' for stdin)",
    )
    parse_parser.add_argument("--json", action="store_true", help="print JSON")
    parse_parser.add_argument(
        "--save", action="store_true", help="append the items to the history database"
    )
    parse_parser.add_argument(
        "--no-fallback", action="store_true", help="do not call the language model fallback"
    )

    # history
    hist_parser = sub.add_parser("history", help="show stored price history")
    hist_parser.add_argument("name", nargs="?", default=None, help="product name")
    hist_parser.add_argument("--json", action="store_true", help="print JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    load_dotenv()
    config = load_config(args.config)

    match args.command:
        case "parse":
            asyncio.run(_cmd_parse(config, args))
        case "history":
            _cmd_history(config, args)


def _read_text(config, args) -> str:
    if args.text:
        if args.text == "-":
            return sys.stdin.read()
        return Path(args.text).read_text(encoding="utf-8")

    from .ocr import OCREngine

    with OCREngine.from_config(config.ocr) as engine:
        texts = [engine.recognize(path) for path in args.image]
    return "\n".join(texts)


async def _cmd_parse(config, args) -> None:
    if not args.text and not args.image:
        print("Either --image or --text is required.", file=sys.stderr)
        sys.exit(2)

    try:
        text = _read_text(config, args)
    except (ImportError, OSError, RuntimeError) as e:
        print(f"Could not read receipt: {e}", file=sys.stderr)
        sys.exit(1)

    if not text.strip():
        print("Receipt text is empty.", file=sys.stderr)
        sys.exit(1)

    try:
        fallback = None if args.no_fallback else create_fallback(config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    extractor = ReceiptExtractor.from_config(config, fallback)
    items = await extractor.extract(text)

    if args.json:
        print(json.dumps([i.to_dict() for i in items], ensure_ascii=False, indent=2))
    else:
        _print_items(items)

    if args.save:
        from .db import PriceHistoryDB

        to_save = [i for i in items if not i.is_sentinel]
        db = PriceHistoryDB(config.database.path)
        try:
            ids = db.append_many(to_save)
        finally:
            db.close()
        print(f"Saved {len(ids)} item(s) to {config.database.path}", file=sys.stderr)


def _print_items(items: list[LineItem]) -> None:
    print(f"{'Name':<30} {'Total':>9} {'Qty':>8} {'Unit':<4} {'Unit price':<16} Date")
    for i in items:
        total = f"{i.price_total:.2f}" if i.price_total is not None else ""
        qty = f"{i.qty_value:g}" if i.qty_value is not None else ""
        print(
            f"{i.name[:30]:<30} {total:>9} {qty:>8} {i.qty_unit:<4} "
            f"{i.unit_price or '':<16} {i.date}"
        )


def _cmd_history(config, args) -> None:
    from .db import PriceHistoryDB

    db = PriceHistoryDB(config.database.path)
    try:
        if args.name is None:
            names = db.get_names()
            if args.json:
                print(json.dumps(names, ensure_ascii=False, indent=2))
            elif not names:
                print("No items saved yet.")
            else:
                for name in names:
                    print(name)
            return

        points = db.get_price_series(args.name)
    finally:
        db.close()

    if args.json:
        data = [
            {"date": p.date, "value": p.value, "unitPrice": p.unit_price}
            for p in points
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not points:
        print(f"No price history for {args.name!r}.")
        return
    print(f"{args.name} ({len(points)} point(s))")
    for p in points:
        label = p.unit_price or f"{p.value:.2f}"
        print(f"  {p.date}  {label}")
