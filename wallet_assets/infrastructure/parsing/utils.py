"""Shared parsing utilities for wallet exports."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path
import hashlib

import pandas as pd


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def compute_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def is_blank(value: object) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    s = str(value).strip()
    return not s or s.upper() == "NAN"


def _parse_number(value: object, what: str) -> Decimal:
    try:
        number = Decimal(str(value).strip().replace(",", "").replace("_", "").replace(" ", ""))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid {what}: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"{what.capitalize()} must be a finite number: {value!r}")
    return number


def _parse_whole(value: object, what: str) -> int:
    number = _parse_number(value, what)
    if number != number.to_integral_value():
        raise ValueError(f"{what.capitalize()} must be a whole number: {value!r}")
    return int(number)


def parse_amount(value: object) -> int:
    """Parse a base-unit amount without going through floats."""
    if is_blank(value):
        return 0
    result = value if isinstance(value, int) else _parse_whole(value, "amount")
    if result < 0:
        raise ValueError(f"Amount must not be negative: {value!r}")
    return result


def parse_locktime(value: object) -> int:
    """Accept unix seconds or an ISO-8601 timestamp (naive values are UTC)."""
    if is_blank(value):
        return 0
    if isinstance(value, int):
        result = value
    else:
        s = str(value).strip()
        try:
            number = Decimal(s)
        except InvalidOperation:
            try:
                moment = datetime.fromisoformat(s)
            except ValueError as exc:
                raise ValueError(f"Invalid locktime: {value!r}") from exc
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            result = int(moment.timestamp())
        else:
            if not number.is_finite():
                raise ValueError(f"Locktime must be a finite number: {value!r}")
            result = int(number)
    if result < 0:
        raise ValueError(f"Locktime must not be negative: {value!r}")
    return result


def parse_output_id(value: object) -> int:
    if is_blank(value):
        raise ValueError("Missing output kind")
    if isinstance(value, int):
        return value
    return _parse_whole(value, "output kind")


def parse_payload(value: object) -> bytes | None:
    if is_blank(value):
        return None
    s = str(value).strip()
    if s.startswith("0x"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        return s.encode("utf-8")
