"""Wallet token holdings and asset metadata reconciliation."""
from wallet_assets.application.use_cases import ReconcileAssetsUseCase, ReconciliationContext
from wallet_assets.application.views import NativeExtrasEnricher, ViewComposer
from wallet_assets.domain.services import BalanceAggregator, UtxoClassifier
from wallet_assets.infrastructure.lookups.catalog import CatalogDescriptionLookup
from wallet_assets.infrastructure.sources.snapshot_source import SnapshotUtxoSource

__all__ = [
    "ReconcileAssetsUseCase",
    "ReconciliationContext",
    "NativeExtrasEnricher",
    "ViewComposer",
    "BalanceAggregator",
    "UtxoClassifier",
    "CatalogDescriptionLookup",
    "SnapshotUtxoSource",
]
