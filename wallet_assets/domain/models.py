"""Domain models for the wallet asset reconciliation engine.

UTXOs are consumed read-only. Asset and NFT family records are created once per
id and only their balance fields change between reconciliation passes.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace

# Output kind discriminants of the exchange chain.
FUNGIBLE_TRANSFER = 7
NFT_MINT = 10
NFT_TRANSFER = 11


@dataclass(frozen=True)
class Utxo:
    """Unspent output owned by the wallet."""

    utxo_id: str
    output_id: int
    asset_id: str
    amount: int = 0
    locktime: int = 0
    group_id: int = 0
    payload: bytes | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"UTXO {self.utxo_id} has a negative amount")
        if self.locktime < 0:
            raise ValueError(f"UTXO {self.utxo_id} has a negative locktime")

    def is_spendable(self, now: int) -> bool:
        return self.locktime <= now


@dataclass(frozen=True)
class AssetDescription:
    """Metadata returned by a description lookup."""

    name: str
    symbol: str
    denomination: int = 0
    asset_id: str | None = None


@dataclass(frozen=True)
class BalanceEntry:
    available: int = 0
    locked: int = 0

    def __add__(self, other: BalanceEntry) -> BalanceEntry:
        if not isinstance(other, BalanceEntry):
            return NotImplemented
        return BalanceEntry(
            available=self.available + other.available,
            locked=self.locked + other.locked,
        )

    @property
    def total(self) -> int:
        return self.available + self.locked


EMPTY_BALANCE = BalanceEntry()


@dataclass(frozen=True)
class ExtraBalance:
    """Display-only amount attached to an asset, e.g. a staked balance."""

    label: str
    amount: int


@dataclass
class AssetRecord:
    """Fungible asset metadata together with the wallet's current holdings."""

    id: str
    name: str
    symbol: str
    denomination: int = 0
    available: int = 0
    locked: int = 0
    extras: tuple[ExtraBalance, ...] = field(default_factory=tuple)

    @classmethod
    def from_description(cls, asset_id: str, description: AssetDescription) -> AssetRecord:
        return cls(
            id=asset_id,
            name=description.name,
            symbol=description.symbol,
            denomination=description.denomination,
        )

    def reset_balance(self) -> None:
        self.available = 0
        self.locked = 0
        self.extras = ()

    def add_balance(self, amount: int) -> None:
        self.available += amount

    def add_balance_locked(self, amount: int) -> None:
        self.locked += amount

    def add_extra(self, extra: ExtraBalance) -> None:
        self.extras = self.extras + (extra,)

    @property
    def extra_total(self) -> int:
        return sum(extra.amount for extra in self.extras)

    @property
    def total(self) -> int:
        return self.available + self.locked + self.extra_total

    def copy(self) -> AssetRecord:
        return replace(self)


@dataclass(frozen=True)
class NftFamilyRecord:
    """Descriptive record for an NFT family; holdings live in the UTXO buckets."""

    id: str
    name: str
    symbol: str

    @classmethod
    def from_description(cls, family_id: str, description: AssetDescription) -> NftFamilyRecord:
        return cls(id=family_id, name=description.name, symbol=description.symbol)
