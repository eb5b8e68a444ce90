"""Extra balance source returning fixed amounts."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StaticExtraBalanceSource:
    staking: int = 0
    platform: int = 0
    platform_locked: int = 0
    platform_locked_stakeable: int = 0

    def __post_init__(self) -> None:
        for name in ("staking", "platform", "platform_locked", "platform_locked_stakeable"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} balance must not be negative")

    def staking_balance(self) -> int:
        return self.staking

    def platform_balance(self) -> int:
        return self.platform

    def platform_balance_locked(self) -> int:
        return self.platform_locked

    def platform_balance_locked_stakeable(self) -> int:
        return self.platform_locked_stakeable
