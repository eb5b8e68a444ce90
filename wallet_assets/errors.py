"""Custom exception hierarchy for wallet_assets."""

from __future__ import annotations


class WalletAssetsError(Exception):
    """Base class for all custom errors raised by wallet_assets."""


class InfrastructureError(WalletAssetsError):
    """Base class for errors raised by external collaborators."""


class ApplicationError(WalletAssetsError):
    """Base class for application-level errors."""


class SourceUnavailableError(InfrastructureError):
    """Raised when the UTXO source cannot refresh or never becomes ready."""


class LookupFailedError(InfrastructureError):
    """Raised when an asset description cannot be fetched for an id."""

    def __init__(self, asset_id: str, reason: str = "") -> None:
        message = f"description lookup failed for {asset_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.asset_id = asset_id
        self.reason = reason


class ReconciliationError(ApplicationError):
    """Raised when a reconciliation step is invoked in an invalid state."""
