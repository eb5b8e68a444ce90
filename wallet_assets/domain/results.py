"""Domain-level results produced by reconciliation passes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .models import AssetRecord, BalanceEntry, NftFamilyRecord, Utxo


@dataclass(frozen=True)
class ClassifiedUtxos:
    fungible: Sequence[Utxo] = field(default_factory=tuple)
    nft_instances: Sequence[Utxo] = field(default_factory=tuple)
    nft_mints: Sequence[Utxo] = field(default_factory=tuple)

    def iter_all(self) -> Iterable[Utxo]:
        yield from self.fungible
        yield from self.nft_instances
        yield from self.nft_mints


@dataclass(frozen=True)
class ResolutionReport:
    """Outcome of one metadata discovery round."""

    resolved: Sequence[str] = field(default_factory=tuple)
    failed: Sequence[str] = field(default_factory=tuple)
    skipped: Sequence[str] = field(default_factory=tuple)

    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass(frozen=True)
class PassOutcome:
    """Summary of a single aggregate, classify and discover pass."""

    reference_time: int
    asset_count: int
    nft_instance_count: int
    nft_mint_count: int
    resolution: ResolutionReport
    committed: bool = True


@dataclass(frozen=True)
class AssetsSnapshot:
    """Read-only view handed to consumers; all records are detached copies."""

    assets: Mapping[str, AssetRecord]
    nft_families: Sequence[NftFamilyRecord]
    balances: Mapping[str, BalanceEntry]
    nft_instances: Mapping[str, Sequence[Utxo]]
    nft_mints: Mapping[str, Sequence[Utxo]]
    native_asset_id: str | None = None

    @property
    def asset_ids(self) -> list[str]:
        return list(self.assets)

    @property
    def native_asset(self) -> AssetRecord | None:
        if self.native_asset_id is None:
            return None
        return self.assets.get(self.native_asset_id)

    def iter_assets(self) -> Iterable[AssetRecord]:
        yield from self.assets.values()
