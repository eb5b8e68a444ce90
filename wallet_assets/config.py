"""Central configuration for the wallet assets package."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wallet_assets.domain.models import FUNGIBLE_TRANSFER, NFT_MINT, NFT_TRANSFER

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "asset_catalog.json"


@dataclass(slots=True, frozen=True)
class Settings:
    fungible_output_id: int
    nft_mint_output_id: int
    nft_transfer_output_id: int
    native_asset_alias: str
    ready_timeout_seconds: float
    max_concurrent_lookups: int
    catalog_path: Path


SETTINGS = Settings(
    fungible_output_id=FUNGIBLE_TRANSFER,
    nft_mint_output_id=NFT_MINT,
    nft_transfer_output_id=NFT_TRANSFER,
    native_asset_alias="AVAX",
    ready_timeout_seconds=30.0,
    max_concurrent_lookups=8,
    catalog_path=DEFAULT_CATALOG_PATH,
)
