"""Collaborator interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import AssetDescription, Utxo


class UtxoSource(Protocol):
    """Provides the wallet's materialized UTXO set."""

    def is_busy(self) -> bool:
        ...

    def get_all(self) -> Sequence[Utxo]:
        ...

    async def refresh(self) -> None:
        """Reload the UTXO set, raising ``SourceUnavailableError`` on failure."""
        ...

    async def wait_until_ready(self) -> None:
        """Return once no refresh is in progress."""
        ...


class DescriptionLookup(Protocol):
    """Resolves an asset id (or an alias such as ``AVAX``) to its description."""

    async def describe(self, asset_id: str) -> AssetDescription:
        ...


class ExtraBalanceSource(Protocol):
    """Balances held outside the exchange chain UTXO set."""

    def staking_balance(self) -> int:
        ...

    def platform_balance(self) -> int:
        ...

    def platform_balance_locked(self) -> int:
        ...

    def platform_balance_locked_stakeable(self) -> int:
        ...
