"""Domain services classifying UTXOs and aggregating fungible balances."""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Iterable, Mapping, Sequence

from .models import (
    EMPTY_BALANCE,
    FUNGIBLE_TRANSFER,
    NFT_MINT,
    NFT_TRANSFER,
    BalanceEntry,
    Utxo,
)
from .results import ClassifiedUtxos

LOGGER = logging.getLogger(__name__)


def unix_now() -> int:
    return int(time.time())


class UtxoClassifier:
    """Partitions a UTXO collection into fungible, NFT instance and NFT mint buckets."""

    def __init__(
        self,
        fungible_output_id: int = FUNGIBLE_TRANSFER,
        nft_transfer_output_id: int = NFT_TRANSFER,
        nft_mint_output_id: int = NFT_MINT,
    ) -> None:
        self._fungible = fungible_output_id
        self._nft_transfer = nft_transfer_output_id
        self._nft_mint = nft_mint_output_id

    def classify(self, utxos: Iterable[Utxo]) -> ClassifiedUtxos:
        fungible: list[Utxo] = []
        nft_instances: list[Utxo] = []
        nft_mints: list[Utxo] = []
        ignored = 0

        for utxo in utxos:
            if utxo.output_id == self._fungible:
                fungible.append(utxo)
            elif utxo.output_id == self._nft_transfer:
                nft_instances.append(utxo)
            elif utxo.output_id == self._nft_mint:
                nft_mints.append(utxo)
            else:
                ignored += 1

        if ignored:
            LOGGER.debug("Ignored %s UTXOs with unknown output kinds", ignored)

        return ClassifiedUtxos(
            fungible=tuple(fungible),
            nft_instances=tuple(nft_instances),
            nft_mints=tuple(nft_mints),
        )


class BalanceAggregator:
    """Folds fungible UTXOs into available and locked totals per asset id.

    Every pass starts from an empty mapping, so the result depends only on the
    UTXOs given and the single reference instant ``now``.
    """

    def __init__(self, fungible_output_id: int = FUNGIBLE_TRANSFER) -> None:
        self._fungible = fungible_output_id

    def aggregate(self, utxos: Iterable[Utxo], now: int) -> dict[str, BalanceEntry]:
        balances: dict[str, BalanceEntry] = {}
        for utxo in utxos:
            if utxo.output_id != self._fungible:
                continue
            current = balances.get(utxo.asset_id, EMPTY_BALANCE)
            if utxo.is_spendable(now):
                balances[utxo.asset_id] = current + BalanceEntry(available=utxo.amount)
            else:
                balances[utxo.asset_id] = current + BalanceEntry(locked=utxo.amount)
        return balances


def balance_for(balances: Mapping[str, BalanceEntry], asset_id: str) -> BalanceEntry:
    return balances.get(asset_id, EMPTY_BALANCE)


def group_by_asset(utxos: Sequence[Utxo]) -> dict[str, list[Utxo]]:
    """Group NFT UTXOs by asset id, which is also the NFT family id."""
    grouped: dict[str, list[Utxo]] = defaultdict(list)
    for utxo in utxos:
        grouped[utxo.asset_id].append(utxo)
    return dict(grouped)
