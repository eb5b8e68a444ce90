"""Append-only metadata cache keyed by asset or NFT family id."""
from __future__ import annotations

from typing import Generic, Iterable, Iterator, Protocol, TypeVar


class _Identified(Protocol):
    @property
    def id(self) -> str:
        ...


RecordT = TypeVar("RecordT", bound=_Identified)


class MetadataCache(Generic[RecordT]):
    """Insertion-ordered id -> record mapping with first-writer-wins inserts.

    Records are never replaced or removed individually; ``clear`` is the only
    way to drop entries and is reserved for a full reset.
    """

    def __init__(self) -> None:
        self._records: dict[str, RecordT] = {}

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(self._records.values())

    def has(self, record_id: str) -> bool:
        return record_id in self._records

    def get(self, record_id: str) -> RecordT | None:
        return self._records.get(record_id)

    def insert_if_absent(self, record: RecordT) -> bool:
        if record.id in self._records:
            return False
        self._records[record.id] = record
        return True

    def unresolved(self, candidate_ids: Iterable[str]) -> list[str]:
        missing: list[str] = []
        seen: set[str] = set()
        for record_id in candidate_ids:
            if record_id in seen or record_id in self._records:
                continue
            seen.add(record_id)
            missing.append(record_id)
        return missing

    def ids(self) -> list[str]:
        return list(self._records)

    def values(self) -> list[RecordT]:
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()
