"""Report generators for wallet asset snapshots."""
from __future__ import annotations

import csv
import html
import io
from decimal import Decimal
from typing import Iterable

import pandas as pd

from wallet_assets.domain.models import AssetRecord
from wallet_assets.domain.results import AssetsSnapshot


def format_amount(amount: int, denomination: int) -> str:
    # Integer split keeps every digit; Decimal would round past 28 digits.
    if denomination <= 0:
        return str(amount)
    whole, fraction = divmod(amount, 10**denomination)
    text = f"{whole}.{fraction:0{denomination}d}"
    return text.rstrip("0").rstrip(".")


def to_decimal(amount: int, denomination: int) -> Decimal:
    return Decimal(format_amount(amount, denomination))


def assets_to_rows(assets: Iterable[AssetRecord]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for asset in assets:
        extras = "; ".join(
            f"{extra.label}={format_amount(extra.amount, asset.denomination)}" for extra in asset.extras
        )
        rows.append(
            {
                "asset_id": asset.id,
                "name": asset.name,
                "symbol": asset.symbol,
                "available": format_amount(asset.available, asset.denomination),
                "locked": format_amount(asset.locked, asset.denomination),
                "extras": extras,
                "total": format_amount(asset.total, asset.denomination),
            }
        )
    return rows


def render_csv(assets: Iterable[AssetRecord]) -> bytes:
    rows = assets_to_rows(assets)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def _html_row(cells: Iterable[str], tag: str) -> str:
    return "<tr>" + "".join(f"<{tag}>{html.escape(cell)}</{tag}>" for cell in cells) + "</tr>"


def render_html(snapshot: AssetsSnapshot) -> str:
    rows = assets_to_rows(snapshot.iter_assets())
    if not rows:
        return "<p>No assets known yet.</p>"
    header = _html_row(rows[0].keys(), "th")
    body = "".join(_html_row(row.values(), "td") for row in rows)
    return f"<table><thead>{header}</thead><tbody>{body}</tbody></table>"


def assets_to_dataframe(assets: Iterable[AssetRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "asset_id": asset.id,
                "name": asset.name,
                "symbol": asset.symbol,
                "denomination": asset.denomination,
                "available": to_decimal(asset.available, asset.denomination),
                "locked": to_decimal(asset.locked, asset.denomination),
                "extras": to_decimal(asset.extra_total, asset.denomination),
                "total": to_decimal(asset.total, asset.denomination),
            }
            for asset in assets
        ],
        columns=["asset_id", "name", "symbol", "denomination", "available", "locked", "extras", "total"],
    )


def render_excel(snapshot: AssetsSnapshot) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        assets_to_dataframe(snapshot.iter_assets()).to_excel(writer, sheet_name="Assets", index=False)
        pd.DataFrame(
            [{"family_id": family.id, "name": family.name, "symbol": family.symbol} for family in snapshot.nft_families],
            columns=["family_id", "name", "symbol"],
        ).to_excel(writer, sheet_name="NFT Families", index=False)
    return buffer.getvalue()
