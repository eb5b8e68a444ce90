import asyncio
import json
from pathlib import Path

import pytest

from wallet_assets.domain.models import AssetDescription
from wallet_assets.errors import LookupFailedError
from wallet_assets.infrastructure.lookups.catalog import (
    AssetCatalog,
    CatalogDescriptionLookup,
    load_catalog,
    save_catalog,
)


def test_save_and_load_catalog(tmp_path: Path):
    path = tmp_path / "asset_catalog.json"
    catalog = AssetCatalog(
        assets={"X": AssetDescription(name="Avalanche", symbol="AVAX", denomination=9)},
        aliases={"avax": "X"},
    )

    saved = save_catalog(catalog, path=path)
    assert saved.aliases == {"AVAX": "X"}
    assert json.loads(path.read_text())["assets"]["X"]["denomination"] == 9

    loaded = load_catalog(path=path)
    assert loaded.assets["X"] == AssetDescription(name="Avalanche", symbol="AVAX", denomination=9, asset_id="X")


def test_invalid_catalog_is_ignored(tmp_path: Path):
    path = tmp_path / "asset_catalog.json"
    path.write_text("{not json")

    assert load_catalog(path=path) == AssetCatalog()


def test_describe_by_id_and_alias(tmp_path: Path):
    path = tmp_path / "asset_catalog.json"
    path.write_text(
        json.dumps(
            {
                "assets": {"X": {"name": "Avalanche", "symbol": "AVAX", "denomination": "9"}},
                "aliases": {"AVAX": "X"},
            }
        )
    )
    lookup = CatalogDescriptionLookup.from_path(path)

    by_alias = asyncio.run(lookup.describe("avax"))
    by_id = asyncio.run(lookup.describe("X"))

    assert by_alias.asset_id == "X"
    assert by_alias == by_id
    assert by_id.denomination == 9


def test_unknown_id_raises_lookup_failed():
    lookup = CatalogDescriptionLookup(AssetCatalog())

    with pytest.raises(LookupFailedError) as excinfo:
        asyncio.run(lookup.describe("nope"))

    assert excinfo.value.asset_id == "nope"
