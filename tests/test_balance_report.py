from decimal import Decimal
from io import BytesIO

import pandas as pd

from wallet_assets.domain.models import AssetRecord, BalanceEntry, ExtraBalance, NftFamilyRecord
from wallet_assets.domain.results import AssetsSnapshot
from wallet_assets.presentation.balance_report import (
    assets_to_dataframe,
    assets_to_rows,
    format_amount,
    render_csv,
    render_excel,
    render_html,
)


def make_snapshot() -> AssetsSnapshot:
    native = AssetRecord(id="X", name="Avalanche", symbol="AVAX", denomination=9, available=1_500_000_000, locked=0)
    native.add_extra(ExtraBalance("staking", 2_000_000_000))
    return AssetsSnapshot(
        assets={"X": native},
        nft_families=(NftFamilyRecord(id="F", name="Family", symbol="FAM"),),
        balances={"X": BalanceEntry(available=1_500_000_000)},
        nft_instances={},
        nft_mints={},
        native_asset_id="X",
    )


def test_format_amount():
    assert format_amount(1_500_000_000, 9) == "1.5"
    assert format_amount(0, 9) == "0"
    assert format_amount(150, 9) == "0.00000015"
    assert format_amount(42, 0) == "42"
    assert format_amount(10**40 + 1, 9) == "10000000000000000000000000000000.000000001"


def test_rows_include_extras_and_total():
    rows = assets_to_rows(make_snapshot().iter_assets())

    assert rows == [
        {
            "asset_id": "X",
            "name": "Avalanche",
            "symbol": "AVAX",
            "available": "1.5",
            "locked": "0",
            "extras": "staking=2",
            "total": "3.5",
        }
    ]


def test_render_csv_and_html():
    snapshot = make_snapshot()

    csv_text = render_csv(snapshot.iter_assets()).decode("utf-8")
    assert csv_text.splitlines()[0] == "asset_id,name,symbol,available,locked,extras,total"
    assert "<td>AVAX</td>" in render_html(snapshot)
    assert render_csv([]) == b""


def test_html_escapes_catalog_text():
    record = AssetRecord(id="Z", name="<script>alert(1)</script>", symbol="A&B", denomination=0, available=1)
    snapshot = AssetsSnapshot(
        assets={"Z": record}, nft_families=(), balances={}, nft_instances={}, nft_mints={}
    )

    rendered = render_html(snapshot)

    assert "<script>" not in rendered
    assert "<td>&lt;script&gt;alert(1)&lt;/script&gt;</td>" in rendered
    assert "<td>A&amp;B</td>" in rendered


def test_empty_snapshot_html():
    snapshot = AssetsSnapshot(assets={}, nft_families=(), balances={}, nft_instances={}, nft_mints={})

    assert render_html(snapshot) == "<p>No assets known yet.</p>"
    assert snapshot.native_asset is None


def test_dataframe_and_excel_export():
    snapshot = make_snapshot()

    df = assets_to_dataframe(snapshot.iter_assets())
    assert df.loc[0, "total"] == Decimal("3.5")

    workbook = pd.read_excel(BytesIO(render_excel(snapshot)), sheet_name=None, engine="openpyxl")
    assert set(workbook) == {"Assets", "NFT Families"}
    assert workbook["NFT Families"].loc[0, "family_id"] == "F"
