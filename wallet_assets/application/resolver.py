"""Metadata resolver filling the asset and NFT family caches on demand."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from wallet_assets.domain.cache import MetadataCache
from wallet_assets.domain.models import AssetRecord, NftFamilyRecord
from wallet_assets.domain.repositories import DescriptionLookup
from wallet_assets.domain.results import ResolutionReport
from wallet_assets.errors import LookupFailedError

LOGGER = logging.getLogger(__name__)


class MetadataResolver:
    """Fetches descriptions for unknown ids and inserts the resulting records.

    Ids are deduplicated across both record kinds, so one lookup serves an id
    that is needed as an asset and as an NFT family at the same time. Ids whose
    lookup is still running from an earlier round are skipped instead of being
    fetched twice. ``invalidate`` starts a new generation: lookups that began
    before it still complete, but their results are dropped.
    """

    def __init__(
        self,
        lookup: DescriptionLookup,
        assets: MetadataCache[AssetRecord],
        families: MetadataCache[NftFamilyRecord],
        max_concurrent_lookups: int = 8,
    ) -> None:
        if max_concurrent_lookups < 1:
            raise ValueError("max_concurrent_lookups must be at least 1")
        self._lookup = lookup
        self._assets = assets
        self._families = families
        self._max_concurrent = max_concurrent_lookups
        self._in_flight: set[str] = set()
        self._generation = 0

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        self._generation += 1
        self._in_flight.clear()

    async def resolve(
        self,
        asset_ids: Iterable[str],
        family_ids: Iterable[str] = (),
    ) -> ResolutionReport:
        wanted_assets = self._assets.unresolved(asset_ids)
        wanted_families = self._families.unresolved(family_ids)

        ordered: list[str] = list(wanted_assets)
        ordered.extend(family_id for family_id in wanted_families if family_id not in wanted_assets)

        to_fetch = [record_id for record_id in ordered if record_id not in self._in_flight]
        skipped = tuple(record_id for record_id in ordered if record_id in self._in_flight)
        if skipped:
            LOGGER.debug("Lookups already in flight for %s", ", ".join(skipped))
        if not to_fetch:
            return ResolutionReport(skipped=skipped)

        generation = self._generation
        self._in_flight.update(to_fetch)
        semaphore = asyncio.Semaphore(self._max_concurrent)
        asset_set = set(wanted_assets)
        family_set = set(wanted_families)

        results = await asyncio.gather(
            *(
                self._resolve_one(
                    record_id,
                    generation,
                    semaphore,
                    as_asset=record_id in asset_set,
                    as_family=record_id in family_set,
                )
                for record_id in to_fetch
            ),
            return_exceptions=True,
        )

        resolved: list[str] = []
        failed: list[str] = []
        # Lookup errors are already reported per id; what is left here is
        # cancellation or a failure while building records.
        interrupted: list[BaseException] = []
        for record_id, result in zip(to_fetch, results):
            if isinstance(result, BaseException):
                failed.append(record_id)
                interrupted.append(result)
            elif result:
                resolved.append(record_id)
            else:
                failed.append(record_id)

        if interrupted:
            raise interrupted[0]

        return ResolutionReport(resolved=tuple(resolved), failed=tuple(failed), skipped=skipped)

    async def _resolve_one(
        self,
        record_id: str,
        generation: int,
        semaphore: asyncio.Semaphore,
        *,
        as_asset: bool,
        as_family: bool,
    ) -> bool:
        try:
            async with semaphore:
                description = await self._lookup.describe(record_id)
        except LookupFailedError as exc:
            LOGGER.warning("lookup-failed: %s (will retry on the next pass)", exc)
            return False
        except Exception as exc:
            LOGGER.warning(
                "lookup-failed: description lookup failed for %s: %r (will retry on the next pass)",
                record_id,
                exc,
            )
            return False
        finally:
            if generation == self._generation:
                self._in_flight.discard(record_id)

        if generation != self._generation:
            LOGGER.debug("Discarding description for %s fetched before reset", record_id)
            return False

        if as_asset:
            self._assets.insert_if_absent(AssetRecord.from_description(record_id, description))
        if as_family:
            self._families.insert_if_absent(NftFamilyRecord.from_description(record_id, description))
        LOGGER.debug("Resolved %s as %s", record_id, description.symbol)
        return True
