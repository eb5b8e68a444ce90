"""Asset description lookup backed by a JSON catalog file."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wallet_assets.config import SETTINGS
from wallet_assets.domain.models import AssetDescription
from wallet_assets.errors import LookupFailedError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetCatalog:
    assets: dict[str, AssetDescription] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)


def _normalize_entry(asset_id: str, raw: Any) -> AssetDescription | None:
    if not isinstance(raw, dict):
        return None
    name = str(raw.get("name") or "").strip()
    symbol = str(raw.get("symbol") or "").strip()
    if not name and not symbol:
        return None
    try:
        denomination = int(raw.get("denomination") or 0)
    except (TypeError, ValueError):
        denomination = 0
    return AssetDescription(
        name=name or symbol,
        symbol=symbol or name,
        denomination=max(denomination, 0),
        asset_id=asset_id,
    )


def _normalize_catalog(raw: Any) -> AssetCatalog:
    if not isinstance(raw, dict):
        return AssetCatalog()
    assets: dict[str, AssetDescription] = {}
    for key, value in (raw.get("assets") or {}).items():
        asset_id = str(key).strip()
        if not asset_id:
            continue
        entry = _normalize_entry(asset_id, value)
        if entry is not None:
            assets[asset_id] = entry
    aliases: dict[str, str] = {}
    for key, value in (raw.get("aliases") or {}).items():
        alias = str(key).strip().upper()
        target = "" if value is None else str(value).strip()
        if alias and target:
            aliases[alias] = target
    return AssetCatalog(assets=assets, aliases=aliases)


def load_catalog(path: Path | None = None) -> AssetCatalog:
    catalog_path = path or SETTINGS.catalog_path
    if not catalog_path.exists():
        return AssetCatalog()
    try:
        data = json.loads(catalog_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        LOGGER.warning("Asset catalog %s is not valid JSON, ignoring it", catalog_path)
        return AssetCatalog()
    return _normalize_catalog(data)


def _catalog_to_document(catalog: AssetCatalog) -> dict[str, Any]:
    return {
        "assets": {
            asset_id: {
                "name": description.name,
                "symbol": description.symbol,
                "denomination": description.denomination,
            }
            for asset_id, description in catalog.assets.items()
        },
        "aliases": dict(catalog.aliases),
    }


def save_catalog(catalog: AssetCatalog, path: Path | None = None) -> AssetCatalog:
    catalog_path = path or SETTINGS.catalog_path
    normalized = _normalize_catalog(_catalog_to_document(catalog))
    catalog_path.parent.mkdir(parents=True, exist_ok=True)
    catalog_path.write_text(
        json.dumps(_catalog_to_document(normalized), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return normalized


class CatalogDescriptionLookup:
    """Resolves ids and aliases (e.g. ``AVAX``) against an :class:`AssetCatalog`."""

    def __init__(self, catalog: AssetCatalog) -> None:
        self._catalog = catalog

    @classmethod
    def from_path(cls, path: Path | None = None) -> CatalogDescriptionLookup:
        return cls(load_catalog(path))

    async def describe(self, asset_id: str) -> AssetDescription:
        resolved_id = self._catalog.aliases.get(asset_id.strip().upper(), asset_id)
        description = self._catalog.assets.get(resolved_id)
        if description is None:
            raise LookupFailedError(asset_id, "not in catalog")
        return description
