"""Command-line entrypoint for wallet asset reconciliation."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from wallet_assets.application.use_cases import ReconcileAssetsUseCase, ReconciliationContext
from wallet_assets.application.views import NativeExtrasEnricher, ViewComposer
from wallet_assets.config import SETTINGS
from wallet_assets.errors import LookupFailedError, ReconciliationError
from wallet_assets.infrastructure.balances.static import StaticExtraBalanceSource
from wallet_assets.infrastructure.lookups.catalog import CatalogDescriptionLookup
from wallet_assets.infrastructure.sources.snapshot_source import SnapshotUtxoSource
from wallet_assets.presentation.balance_report import assets_to_rows, render_csv, render_excel

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize wallet token holdings from a UTXO export")
    parser.add_argument("utxos", type=str, help="Path to UTXO export (.json, .csv, .xlsx)")
    parser.add_argument("--catalog", type=str, help="Path to asset catalog JSON")
    parser.add_argument("--native-alias", type=str, default=SETTINGS.native_asset_alias, help="Alias of the native asset")
    parser.add_argument("--staking", type=int, default=0, help="Staked native balance in base units")
    parser.add_argument("--platform", type=int, default=0, help="Platform chain balance in base units")
    parser.add_argument("--platform-locked", type=int, default=0, help="Locked platform chain balance")
    parser.add_argument("--platform-locked-stakeable", type=int, default=0, help="Locked stakeable platform balance")
    parser.add_argument("--csv", type=str, help="Write the balances table to this CSV file")
    parser.add_argument("--xlsx", type=str, help="Write the balances workbook to this Excel file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = replace(SETTINGS, native_asset_alias=args.native_alias)
    if args.catalog:
        settings = replace(settings, catalog_path=Path(args.catalog))

    extras = StaticExtraBalanceSource(
        staking=args.staking,
        platform=args.platform,
        platform_locked=args.platform_locked,
        platform_locked_stakeable=args.platform_locked_stakeable,
    )
    context = ReconciliationContext(
        source=SnapshotUtxoSource(args.utxos),
        lookup=CatalogDescriptionLookup.from_path(settings.catalog_path),
        composer=ViewComposer([NativeExtrasEnricher(extras)]),
        settings=settings,
    )
    use_case = ReconcileAssetsUseCase(context)

    try:
        await use_case.bootstrap_native_asset()
    except (LookupFailedError, ReconciliationError) as exc:
        LOGGER.warning("Native asset unavailable: %s", exc)

    if not await use_case.trigger_update():
        print("Balance update failed; see log for details.")
        return 1

    snapshot = use_case.snapshot()
    print("Wallet Summary")
    print("==============")
    print(f"Known assets: {len(snapshot.assets)}")
    print(f"Assets with balances: {len(snapshot.balances)}")
    print(f"NFT families: {len(snapshot.nft_families)}")
    print(f"NFTs held: {sum(len(items) for items in snapshot.nft_instances.values())}")
    print(f"NFT mint outputs: {sum(len(items) for items in snapshot.nft_mints.values())}")

    unresolved = [asset_id for asset_id in snapshot.balances if asset_id not in snapshot.assets]
    if unresolved:
        print(f"Unresolved asset ids: {', '.join(unresolved)}")

    print()
    for row in assets_to_rows(snapshot.iter_assets()):
        line = f"- {row['symbol']} ({row['name']}): available {row['available']}, locked {row['locked']}"
        if row["extras"]:
            line += f", extras [{row['extras']}]"
        print(f"{line}, total {row['total']}")

    if args.csv:
        Path(args.csv).write_bytes(render_csv(snapshot.iter_assets()))
    if args.xlsx:
        Path(args.xlsx).write_bytes(render_excel(snapshot))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
