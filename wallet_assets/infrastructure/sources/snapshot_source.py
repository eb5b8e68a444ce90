"""File-backed UTXO source reading wallet exports (JSON, CSV or Excel)."""
from __future__ import annotations

import asyncio
import json
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from wallet_assets.domain.models import Utxo
from wallet_assets.errors import SourceUnavailableError
from wallet_assets.infrastructure.parsing.utils import (
    compute_file_hash,
    ensure_bytes,
    is_blank,
    parse_amount,
    parse_locktime,
    parse_output_id,
    parse_payload,
)

LOGGER = logging.getLogger(__name__)

KNOWN_OUTPUT_COLUMNS = ["output_id", "output_kind", "kind", "outputID"]
KNOWN_ASSET_COLUMNS = ["asset_id", "assetID", "asset"]
KNOWN_UTXO_ID_COLUMNS = ["utxo_id", "utxoID", "id"]


def _first_present(row: Mapping[str, Any], columns: Sequence[str]) -> Any:
    for column in columns:
        if column in row and not is_blank(row[column]):
            return row[column]
    return None


def rows_to_utxos(rows: Iterable[Mapping[str, Any]]) -> list[Utxo]:
    utxos: list[Utxo] = []
    for index, row in enumerate(rows):
        asset_id = _first_present(row, KNOWN_ASSET_COLUMNS)
        if asset_id is None:
            raise ValueError(f"Row {index} has no asset id")
        utxo_id = _first_present(row, KNOWN_UTXO_ID_COLUMNS)
        group_id = row.get("group_id")
        utxos.append(
            Utxo(
                utxo_id=str(utxo_id).strip() if utxo_id is not None else f"row-{index}",
                output_id=parse_output_id(_first_present(row, KNOWN_OUTPUT_COLUMNS)),
                asset_id=str(asset_id).strip(),
                amount=parse_amount(row.get("amount")),
                locktime=parse_locktime(row.get("locktime")),
                group_id=0 if is_blank(group_id) else int(str(group_id).strip()),
                payload=parse_payload(row.get("payload")),
            )
        )
    return utxos


def read_snapshot_rows(data: bytes, suffix: str, sheet_name: str | int = 0) -> list[dict[str, Any]]:
    suffix = suffix.lower()
    if suffix == ".json":
        document = json.loads(data.decode("utf-8"))
        if isinstance(document, dict):
            document = document.get("utxos", [])
        if not isinstance(document, list):
            raise ValueError("JSON snapshot must be a list of UTXOs or an object with a 'utxos' list")
        for index, item in enumerate(document):
            if not isinstance(item, dict):
                raise ValueError(f"UTXO entry {index} must be an object, got {type(item).__name__}")
        return [dict(item) for item in document]
    if suffix == ".csv":
        df = pd.read_csv(BytesIO(data), dtype=str, keep_default_na=False)
    elif suffix in (".xlsx", ".xlsm"):
        df = pd.read_excel(BytesIO(data), sheet_name=sheet_name, engine="openpyxl", dtype=str, keep_default_na=False)
    elif suffix == ".xls":
        df = pd.read_excel(BytesIO(data), sheet_name=sheet_name, dtype=str, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported snapshot format: {suffix or '<none>'}")
    df.columns = [str(column).strip() for column in df.columns]
    return df.to_dict(orient="records")


def snapshot_to_utxos(source: BytesIO | Path | bytes, suffix: str, sheet_name: str | int = 0) -> list[Utxo]:
    return rows_to_utxos(read_snapshot_rows(ensure_bytes(source), suffix, sheet_name=sheet_name))


class SnapshotUtxoSource:
    """UTXO source backed by a wallet export file that is re-read on refresh.

    Readiness is signalled with an ``asyncio.Event`` that is set whenever no
    refresh is running, so waiters do not need to poll. A file whose content
    hash matches the last successful load is not parsed again.
    """

    def __init__(self, path: Path | str, sheet_name: str | int = 0) -> None:
        self._path = Path(path)
        self._sheet_name = sheet_name
        self._utxos: tuple[Utxo, ...] = ()
        self._fingerprint: str | None = None
        self._busy = False
        self._ready: asyncio.Event | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    def is_busy(self) -> bool:
        return self._busy

    def get_all(self) -> Sequence[Utxo]:
        return self._utxos

    async def wait_until_ready(self) -> None:
        if not self._busy or self._ready is None:
            return
        await self._ready.wait()

    async def refresh(self) -> None:
        if self._busy:
            await self.wait_until_ready()
            return

        self._busy = True
        self._ready = asyncio.Event()
        try:
            fingerprint, utxos = await asyncio.to_thread(self._load, self._fingerprint)
        except (OSError, ValueError, KeyError) as exc:
            raise SourceUnavailableError(f"cannot read UTXO snapshot {self._path}: {exc}") from exc
        finally:
            self._busy = False
            self._ready.set()

        if utxos is None:
            LOGGER.debug("UTXO snapshot %s unchanged, keeping %s UTXOs", self._path, len(self._utxos))
            return
        self._fingerprint = fingerprint
        self._utxos = tuple(utxos)
        LOGGER.info("Loaded %s UTXOs from %s", len(utxos), self._path)

    def _load(self, previous: str | None) -> tuple[str, list[Utxo] | None]:
        data = ensure_bytes(self._path)
        fingerprint = compute_file_hash(data)
        if fingerprint == previous:
            return fingerprint, None
        return fingerprint, snapshot_to_utxos(data, self._path.suffix, sheet_name=self._sheet_name)
