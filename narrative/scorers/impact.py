"""Materiality-scaled base impacts for sticky signals."""

from __future__ import annotations

CONTRACT_STICKY_THRESHOLD = 10_000_000
FUNDING_STICKY_THRESHOLD = 100_000_000


def contract_impact(amount: float) -> float:
    if amount >= 500_000_000:
        return 5
    if amount >= 100_000_000:
        return 3
    if amount >= 50_000_000:
        return 2
    if amount >= 10_000_000:
        return 1
    return 0.5


def funding_impact(amount: float) -> float:
    if amount >= 500_000_000:
        return 5
    if amount >= 300_000_000:
        return 4
    if amount >= 200_000_000:
        return 3
    if amount >= 100_000_000:
        return 2
    if amount >= 50_000_000:
        return 1.5
    if amount >= 30_000_000:
        return 1
    return 0.5
