"""Compose consumer-facing asset views from cached metadata and balances."""
from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence

from wallet_assets.domain.models import AssetRecord, BalanceEntry, ExtraBalance
from wallet_assets.domain.repositories import ExtraBalanceSource
from wallet_assets.domain.services import balance_for

STAKING = "staking"
PLATFORM = "platform"
PLATFORM_LOCKED = "platform_locked"
PLATFORM_LOCKED_STAKEABLE = "platform_locked_stakeable"


class AssetEnricher(Protocol):
    """Adds display-only extra balances to selected assets."""

    def applies_to(self, asset_id: str, native_asset_id: str | None) -> bool:
        ...

    def extras(self) -> Sequence[ExtraBalance]:
        ...


class NativeExtrasEnricher:
    """Attaches staking and platform chain balances to the native asset."""

    def __init__(self, source: ExtraBalanceSource) -> None:
        self._source = source

    def applies_to(self, asset_id: str, native_asset_id: str | None) -> bool:
        return native_asset_id is not None and asset_id == native_asset_id

    def extras(self) -> Sequence[ExtraBalance]:
        return (
            ExtraBalance(STAKING, self._source.staking_balance()),
            ExtraBalance(PLATFORM, self._source.platform_balance()),
            ExtraBalance(PLATFORM_LOCKED, self._source.platform_balance_locked()),
            ExtraBalance(PLATFORM_LOCKED_STAKEABLE, self._source.platform_balance_locked_stakeable()),
        )


class FixedExtrasEnricher:
    def __init__(self, asset_id: str, extras: Iterable[ExtraBalance]) -> None:
        self._asset_id = asset_id
        self._extras = tuple(extras)

    def applies_to(self, asset_id: str, native_asset_id: str | None) -> bool:
        return asset_id == self._asset_id

    def extras(self) -> Sequence[ExtraBalance]:
        return self._extras


class ViewComposer:
    """Joins asset metadata with the latest balance map.

    The join tolerates a balance map that is stale relative to the metadata:
    assets without a balance entry show zero, balance entries without metadata
    are left out until their record is resolved.
    """

    def __init__(self, enrichers: Sequence[AssetEnricher] = ()) -> None:
        self._enrichers = tuple(enrichers)

    def compose(
        self,
        assets: Iterable[AssetRecord],
        balances: Mapping[str, BalanceEntry],
        native_asset_id: str | None = None,
    ) -> dict[str, AssetRecord]:
        view: dict[str, AssetRecord] = {}
        for record in assets:
            asset = record.copy()
            asset.reset_balance()
            entry = balance_for(balances, asset.id)
            asset.add_balance(entry.available)
            asset.add_balance_locked(entry.locked)
            for enricher in self._enrichers:
                if enricher.applies_to(asset.id, native_asset_id):
                    for extra in enricher.extras():
                        asset.add_extra(extra)
            view[asset.id] = asset
        return view
