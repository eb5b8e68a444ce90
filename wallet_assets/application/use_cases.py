"""Application services orchestrating wallet asset reconciliation."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from wallet_assets.application.resolver import MetadataResolver
from wallet_assets.application.views import ViewComposer
from wallet_assets.config import SETTINGS, Settings
from wallet_assets.domain.cache import MetadataCache
from wallet_assets.domain.models import AssetRecord, BalanceEntry, NftFamilyRecord, Utxo
from wallet_assets.domain.repositories import DescriptionLookup, UtxoSource
from wallet_assets.domain.results import AssetsSnapshot, PassOutcome, ResolutionReport
from wallet_assets.domain.services import (
    BalanceAggregator,
    UtxoClassifier,
    group_by_asset,
    unix_now,
)
from wallet_assets.errors import ReconciliationError, SourceUnavailableError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationContext:
    source: UtxoSource
    lookup: DescriptionLookup
    composer: ViewComposer = field(default_factory=ViewComposer)
    settings: Settings = SETTINGS
    clock: Callable[[], int] = unix_now


class ReconcileAssetsUseCase:
    """Owns the wallet's balance map, NFT buckets and metadata caches.

    A pass runs aggregate, classify and discover in that order. Only this class
    writes the shared state; readers get detached copies through the ``get_*``
    methods or ``snapshot``.
    """

    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context
        settings = context.settings
        self._classifier = UtxoClassifier(
            fungible_output_id=settings.fungible_output_id,
            nft_transfer_output_id=settings.nft_transfer_output_id,
            nft_mint_output_id=settings.nft_mint_output_id,
        )
        self._aggregator = BalanceAggregator(fungible_output_id=settings.fungible_output_id)
        self._assets: MetadataCache[AssetRecord] = MetadataCache()
        self._families: MetadataCache[NftFamilyRecord] = MetadataCache()
        self._resolver = MetadataResolver(
            context.lookup,
            self._assets,
            self._families,
            max_concurrent_lookups=settings.max_concurrent_lookups,
        )
        self._balances: dict[str, BalanceEntry] = {}
        self._nft_utxos: tuple[Utxo, ...] = ()
        self._nft_mint_utxos: tuple[Utxo, ...] = ()
        self._native_asset_id: str | None = None
        self._is_updating = False

    @property
    def is_updating(self) -> bool:
        return self._is_updating

    @property
    def native_asset_id(self) -> str | None:
        return self._native_asset_id

    # -- write side -------------------------------------------------------

    async def trigger_update(self) -> bool:
        """Refresh the UTXO source and reconcile; ``False`` if nothing was updated."""
        if self._is_updating:
            LOGGER.info("UTXO update already in progress, skipping")
            return False

        LOGGER.info("Updating UTXOs")
        self._is_updating = True
        generation = self._resolver.generation
        try:
            await self._context.source.refresh()
            outcome = await self.on_utxos_updated(generation=generation)
        except SourceUnavailableError as exc:
            LOGGER.error("source-unavailable: %s (keeping last known balances)", exc)
            return False
        finally:
            if generation == self._resolver.generation:
                self._is_updating = False
        return outcome.committed

    async def on_utxos_updated(self, *, generation: int | None = None) -> PassOutcome:
        """Run one aggregate, classify and discover pass over the current UTXO set.

        ``generation`` pins the pass to the state it was started for; if a reset
        happened since, the pass leaves the state untouched.
        """
        if generation is None:
            generation = self._resolver.generation

        source = self._context.source
        if source.is_busy():
            LOGGER.debug("UTXO source busy, waiting for it to become ready")
            try:
                await asyncio.wait_for(
                    source.wait_until_ready(),
                    timeout=self._context.settings.ready_timeout_seconds,
                )
            except asyncio.TimeoutError as exc:
                raise SourceUnavailableError("UTXO source did not become ready in time") from exc

        now = self._context.clock()
        if generation != self._resolver.generation:
            return self._discarded_outcome(now)

        utxos = source.get_all()
        balances = self._aggregator.aggregate(utxos, now)
        classified = self._classifier.classify(utxos)

        self._balances = balances
        self._nft_utxos = tuple(classified.nft_instances)
        self._nft_mint_utxos = tuple(classified.nft_mints)
        LOGGER.info(
            "UTXOs updated: %s assets with balances, %s NFTs, %s NFT mint outputs",
            len(balances),
            len(self._nft_utxos),
            len(self._nft_mint_utxos),
        )

        resolution = await self.add_unknown_assets()
        return PassOutcome(
            reference_time=now,
            asset_count=len(balances),
            nft_instance_count=len(classified.nft_instances),
            nft_mint_count=len(classified.nft_mints),
            resolution=resolution,
            committed=generation == self._resolver.generation,
        )

    async def add_unknown_assets(self) -> ResolutionReport:
        """Look up descriptions for every id seen in balances or NFT buckets."""
        asset_ids = list(self._balances)
        asset_ids.extend(utxo.asset_id for utxo in self._nft_utxos)
        family_ids = [utxo.asset_id for utxo in self._nft_mint_utxos]
        report = await self._resolver.resolve(asset_ids, family_ids)
        if report.has_failures():
            LOGGER.warning("%s ids remain unresolved: %s", len(report.failed), ", ".join(report.failed))
        return report

    async def bootstrap_native_asset(self) -> AssetRecord:
        """Resolve the network's native asset once and register its record."""
        existing = self.get_native_asset()
        if existing is not None:
            return existing

        alias = self._context.settings.native_asset_alias
        generation = self._resolver.generation
        description = await self._context.lookup.describe(alias)
        if not description.asset_id:
            raise ReconciliationError(f"native asset alias {alias!r} did not resolve to an asset id")
        record = AssetRecord.from_description(description.asset_id, description)
        if generation != self._resolver.generation:
            LOGGER.debug("Reset happened during native asset lookup, discarding %s", record.id)
            return record

        if self._native_asset_id is None:
            self._native_asset_id = record.id
        self._assets.insert_if_absent(record)
        LOGGER.info("Native asset is %s (%s)", record.symbol, record.id)
        return self.get_native_asset() or record

    def reset(self) -> None:
        """Drop every record, bucket and balance, e.g. on logout."""
        self._resolver.invalidate()
        self._assets.clear()
        self._families.clear()
        self._nft_utxos = ()
        self._nft_mint_utxos = ()
        self._balances = {}
        self._native_asset_id = None
        self._is_updating = False
        LOGGER.info("Wallet assets reset")

    # -- read side --------------------------------------------------------

    def get_assets_view(self) -> dict[str, AssetRecord]:
        return self._context.composer.compose(
            self._assets.values(), self._balances, self._native_asset_id
        )

    def get_assets_array(self) -> list[AssetRecord]:
        return list(self.get_assets_view().values())

    def get_nft_families(self) -> list[NftFamilyRecord]:
        return self._families.values()

    def get_asset_ids(self) -> list[str]:
        return self._assets.ids()

    def get_native_asset(self) -> AssetRecord | None:
        if self._native_asset_id is None:
            return None
        return self.get_assets_view().get(self._native_asset_id)

    def get_balances(self) -> dict[str, BalanceEntry]:
        return dict(self._balances)

    def get_nft_instances(self) -> dict[str, list[Utxo]]:
        return group_by_asset(self._nft_utxos)

    def get_nft_mints(self) -> dict[str, list[Utxo]]:
        return group_by_asset(self._nft_mint_utxos)

    def snapshot(self) -> AssetsSnapshot:
        return AssetsSnapshot(
            assets=self.get_assets_view(),
            nft_families=tuple(self.get_nft_families()),
            balances=self.get_balances(),
            nft_instances={key: tuple(value) for key, value in self.get_nft_instances().items()},
            nft_mints={key: tuple(value) for key, value in self.get_nft_mints().items()},
            native_asset_id=self._native_asset_id,
        )

    def _discarded_outcome(self, now: int) -> PassOutcome:
        LOGGER.info("Reset happened during the pass, discarding its results")
        return PassOutcome(
            reference_time=now,
            asset_count=0,
            nft_instance_count=0,
            nft_mint_count=0,
            resolution=ResolutionReport(),
            committed=False,
        )
