from __future__ import annotations

import asyncio
from typing import Callable, Sequence

import pytest

from wallet_assets.domain.models import AssetDescription, Utxo
from wallet_assets.errors import LookupFailedError, SourceUnavailableError

NOW = 1_700_000_000
PAST = NOW - 3600
FUTURE = NOW + 3600


class FakeUtxoSource:
    def __init__(self, utxos: Sequence[Utxo] = ()) -> None:
        self.utxos = list(utxos)
        self.pending: list[Utxo] | None = None
        self.refresh_error: str | None = None
        self.refresh_calls = 0
        self.busy = False
        self.ready: asyncio.Event | None = None
        self.refresh_gate: asyncio.Event | None = None

    def is_busy(self) -> bool:
        return self.busy

    def get_all(self) -> Sequence[Utxo]:
        return tuple(self.utxos)

    async def refresh(self) -> None:
        self.refresh_calls += 1
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        if self.refresh_error:
            raise SourceUnavailableError(self.refresh_error)
        if self.pending is not None:
            self.utxos = self.pending
            self.pending = None

    async def wait_until_ready(self) -> None:
        if self.ready is not None:
            await self.ready.wait()


class FakeLookup:
    def __init__(self, descriptions: dict[str, AssetDescription] | None = None) -> None:
        self.descriptions = dict(descriptions or {})
        self.failures: set[str] = set()
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    async def describe(self, asset_id: str) -> AssetDescription:
        self.calls.append(asset_id)
        if self.gate is not None:
            await self.gate.wait()
        if asset_id in self.failures or asset_id not in self.descriptions:
            raise LookupFailedError(asset_id, "unknown")
        return self.descriptions[asset_id]


def fungible(asset_id: str, amount: int, locktime: int = 0, utxo_id: str | None = None) -> Utxo:
    return Utxo(
        utxo_id=utxo_id or f"{asset_id}-{amount}-{locktime}",
        output_id=7,
        asset_id=asset_id,
        amount=amount,
        locktime=locktime,
    )


def nft(asset_id: str, output_id: int = 11, utxo_id: str | None = None, group_id: int = 0) -> Utxo:
    return Utxo(
        utxo_id=utxo_id or f"{asset_id}-{output_id}-{group_id}",
        output_id=output_id,
        asset_id=asset_id,
        group_id=group_id,
    )


def describe(symbol: str, denomination: int = 0, asset_id: str | None = None) -> AssetDescription:
    return AssetDescription(name=f"{symbol} token", symbol=symbol, denomination=denomination, asset_id=asset_id)


@pytest.fixture
def source() -> FakeUtxoSource:
    return FakeUtxoSource()


@pytest.fixture
def lookup() -> FakeLookup:
    return FakeLookup()


@pytest.fixture
def make_fungible() -> Callable[..., Utxo]:
    return fungible


@pytest.fixture
def make_nft() -> Callable[..., Utxo]:
    return nft


@pytest.fixture
def make_description() -> Callable[..., AssetDescription]:
    return describe


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def past() -> int:
    return PAST


@pytest.fixture
def future() -> int:
    return FUTURE


@pytest.fixture
def make_source() -> Callable[..., FakeUtxoSource]:
    return FakeUtxoSource


@pytest.fixture
def make_lookup() -> Callable[..., FakeLookup]:
    return FakeLookup
