"""Oracle accounts, oracle readings, health tracking and consensus figures."""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional

SIGNATURE_LENGTH = 64


class OracleType(Enum):
    PYTH = "Pyth"


@dataclass
class OracleData:
    """One signed reading published by an oracle."""

    value: int
    timestamp: int
    confidence: int
    signature: bytes = bytes(SIGNATURE_LENGTH)
    nonce: int = 0

    def __post_init__(self) -> None:
        self.signature = bytes(self.signature)
        if len(self.signature) != SIGNATURE_LENGTH:
            raise ValueError(
                f"signature must be {SIGNATURE_LENGTH} bytes, got {len(self.signature)}"
            )


@dataclass
class OracleHealthMetrics:
    """Running health figures for one oracle, including its circuit breaker."""

    updates_24h: int = 0
    accuracy_score: int = 100
    last_health_check: int = 0
    failed_validations: int = 0
    circuit_breaker_active: bool = False

    def record_successful_update(self, current_timestamp: int) -> None:
        self.updates_24h += 1
        self.last_health_check = current_timestamp
        self.accuracy_score = min(100, self.accuracy_score + 1)

    def record_failed_validation(self, current_timestamp: int) -> None:
        self.failed_validations += 1
        self.last_health_check = current_timestamp
        self.accuracy_score = max(0, self.accuracy_score - 5)
        if self.failed_validations >= 5:
            self.circuit_breaker_active = True

    def reset_daily_metrics(self, current_timestamp: int) -> None:
        """Start a new day; a well-performing oracle also has its failures forgiven."""
        self.updates_24h = 0
        self.last_health_check = current_timestamp
        if self.accuracy_score > 80:
            self.failed_validations = 0
            self.circuit_breaker_active = False


@dataclass
class ConsensusData:
    """Aggregate of several oracle readings."""

    aggregated_value: int
    confidence_score: int
    oracle_count: int
    consensus_timestamp: int
    median_value: int
    standard_deviation: int

    @classmethod
    def from_oracle_values(cls, values: Sequence[int], timestamp: int) -> ConsensusData:
        aggregated = _mean(values)
        deviation = _standard_deviation(values, aggregated)
        return cls(
            aggregated_value=aggregated,
            confidence_score=_confidence_score(values, deviation),
            oracle_count=len(values) & 0xFF,
            consensus_timestamp=timestamp,
            median_value=_median(values),
            standard_deviation=deviation,
        )

    @staticmethod
    def integer_sqrt(n: int) -> int:
        """Largest integer whose square does not exceed ``n``."""
        return math.isqrt(n)


def _mean(values: Sequence[int]) -> int:
    if not values:
        return 0
    return sum(values) // len(values)


def _median(values: Sequence[int]) -> int:
    if not values:
        return 0
    return int(statistics.median_low(values)) if len(values) % 2 else _even_median(values)


def _even_median(values: Sequence[int]) -> int:
    ordered = sorted(values)
    half = len(ordered) // 2
    return (ordered[half - 1] + ordered[half]) // 2


def _standard_deviation(values: Sequence[int], mean: int) -> int:
    if len(values) <= 1:
        return 0
    variance = sum((value - mean) ** 2 for value in values) // len(values)
    return math.isqrt(variance)


def _confidence_score(values: Sequence[int], std_dev: int) -> int:
    """100 minus the coefficient of variation in percent, floored at 0."""
    mean = _mean(values)
    if mean == 0:
        return 0
    variation = std_dev * 100 // mean
    return 0 if variation > 100 else 100 - variation


@dataclass
class Oracle:
    """A registered data feed and the latest reading it supplied."""

    MAX_ORACLE_ID_LENGTH: ClassVar[int] = 32
    MAX_DATA_FEED_ADDRESS_LENGTH: ClassVar[int] = 64

    oracle_id: str
    authority: str
    oracle_type: OracleType = OracleType.PYTH
    is_active: bool = True
    last_update_timestamp: int = 0
    data_feed_address: str = ""
    latest_data: Optional[OracleData] = None
    reputation_score: int = 100
    update_count: int = 0
    health_metrics: OracleHealthMetrics = field(default_factory=OracleHealthMetrics)
    bump: int = 0

    @staticmethod
    def space() -> int:
        """Bytes reserved for an oracle account."""
        return (
            8  # discriminator
            + 4 + Oracle.MAX_ORACLE_ID_LENGTH  # oracle_id
            + 32  # authority
            + 1  # oracle_type
            + 1  # is_active
            + 8  # last_update_timestamp
            + 4 + Oracle.MAX_DATA_FEED_ADDRESS_LENGTH  # data_feed_address
            + 1 + 8 + 8 + 8 + 64 + 8  # latest_data
            + 1  # reputation_score
            + 8  # update_count
            + 4 + 1 + 8 + 4 + 1  # health_metrics
            + 1  # bump
        )