# shelfsafe/cli.py
"""
Print the dashboard of a running ShelfSafe API.

    shelfsafe-dashboard --base-url http://localhost:5000 --limit 5
"""
from __future__ import annotations
import argparse
import asyncio
import sys
from typing import List, Optional

import pandas as pd

from shelfsafe.client import AggregationError, ShelfSafeClient, load_dashboard
from shelfsafe.models import DashboardSnapshot
from shelfsafe.settings import settings

NO_IMAGE = "No Image"

PRODUCT_COLUMNS = ["name", "category", "barcode", "image_url"]
LOT_COLUMNS = ["product_name", "quantity_on_hand", "expiry_date", "status", "image_url"]


def _frame(rows: List[dict], columns: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=columns)
    if "image_url" in df.columns:
        df["image_url"] = df["image_url"].fillna(NO_IMAGE)
    return df.fillna("")


def products_frame(snapshot: DashboardSnapshot, limit: Optional[int] = None) -> pd.DataFrame:
    cards = snapshot.products[:limit] if limit else snapshot.products
    return _frame([c.model_dump() for c in cards], PRODUCT_COLUMNS)


def lots_frame(snapshot: DashboardSnapshot, limit: Optional[int] = None) -> pd.DataFrame:
    cards = snapshot.lots[:limit] if limit else snapshot.lots
    return _frame([c.model_dump() for c in cards], LOT_COLUMNS)


def render(snapshot: DashboardSnapshot, limit: Optional[int] = None) -> str:
    s = snapshot.summary
    qty = int(s.total_qty_on_hand) if float(s.total_qty_on_hand).is_integer() else s.total_qty_on_hand
    lines = [
        f"Products: {s.products}  Lots: {s.lots}  Total Qty On Hand: {qty}  Attachments: {s.attachments}",
        "",
        "Products",
    ]
    pf = products_frame(snapshot, limit)
    lines.append(pf.to_string(index=False) if not pf.empty else "No products loaded.")
    lines += ["", "Inventory Lots"]
    lf = lots_frame(snapshot, limit)
    lines.append(lf.to_string(index=False) if not lf.empty else "No inventory lots loaded.")
    return "\n".join(lines)


async def _run(base_url: str, timeout: float) -> DashboardSnapshot:
    async with ShelfSafeClient(base_url, timeout=timeout) as client:
        return await load_dashboard(client)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Show the ShelfSafe inventory dashboard")
    ap.add_argument("--base-url", default=settings.API_BASE_URL, help="ShelfSafe API root")
    ap.add_argument("--limit", type=int, default=0, help="Rows per table (0 = all)")
    ap.add_argument("--timeout", type=float, default=settings.HTTP_TIMEOUT, help="HTTP timeout in seconds")
    args = ap.parse_args(argv)

    try:
        snapshot = asyncio.run(_run(args.base_url, args.timeout))
    except AggregationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(render(snapshot, limit=args.limit or None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
