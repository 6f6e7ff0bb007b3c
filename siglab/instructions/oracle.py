"""Oracle instructions: registration, data updates, consensus and health checks."""

from __future__ import annotations

import logging
import math
import struct
from collections.abc import Iterable, Sequence

from siglab.errors import ErrorCode, InsuranceError, require
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.oracle import ConsensusData, Oracle, OracleData, OracleHealthMetrics, OracleType

logger = logging.getLogger(__name__)

MAX_DATA_AGE = 5 * 60
CONSENSUS_MAX_AGE = 10 * 60
MAX_CHANGE_PERCENTAGE = 50
HEALTHY_REPUTATION = 70
PYTH_MAGIC = 0xA1B2C3D4
PYTH_MIN_ACCOUNT_SIZE = 208

_MESSAGE_LAYOUT = struct.Struct("<QqQQ")
_PYTH_READING = struct.Struct("<QqQ")
_PYTH_PRICE_END = 264


def _require_admin(master_contract: MasterInsuranceContract, admin: str) -> None:
    require(master_contract.authority == admin, ErrorCode.UNAUTHORIZED)


def register_oracle(
    master_contract: MasterInsuranceContract,
    admin: str,
    oracle_key: str,
    oracle_authority: str,
    oracle_id: str,
    oracle_type: OracleType,
    data_feed_address: str,
) -> Oracle:
    """Create an oracle account and add ``oracle_key`` to the registry."""
    _require_admin(master_contract, admin)
    require(
        len(oracle_id.encode("utf-8")) <= Oracle.MAX_ORACLE_ID_LENGTH,
        ErrorCode.INVALID_INPUT,
    )
    require(
        len(data_feed_address.encode("utf-8")) <= Oracle.MAX_DATA_FEED_ADDRESS_LENGTH,
        ErrorCode.INVALID_INPUT,
    )
    require(
        len(master_contract.oracle_registry) < master_contract.max_oracles,
        ErrorCode.MAX_ORACLES_EXCEEDED,
    )
    require(
        oracle_key not in master_contract.oracle_registry,
        ErrorCode.ORACLE_ALREADY_REGISTERED,
    )
    require(oracle_type is OracleType.PYTH, ErrorCode.INVALID_ORACLE_DATA)

    oracle = Oracle(
        oracle_id=oracle_id,
        authority=oracle_authority,
        oracle_type=oracle_type,
        is_active=True,
        last_update_timestamp=0,
        data_feed_address=data_feed_address,
        latest_data=None,
        reputation_score=100,
        update_count=0,
        health_metrics=OracleHealthMetrics(),
    )
    master_contract.oracle_registry.append(oracle_key)
    return oracle


def unregister_oracle(
    master_contract: MasterInsuranceContract, admin: str, oracle_key: str
) -> None:
    _require_admin(master_contract, admin)
    master_contract.oracle_registry[:] = [
        key for key in master_contract.oracle_registry if key != oracle_key
    ]


def update_oracle_data(oracle: Oracle, oracle_authority: str, data: OracleData, now: int) -> None:
    """Accept a new reading from the oracle's authority after validating it."""
    require(oracle.authority == oracle_authority, ErrorCode.UNAUTHORIZED)
    require(oracle.is_active, ErrorCode.ORACLE_INACTIVE)

    validate_data_reasonableness(oracle, data, MAX_CHANGE_PERCENTAGE)
    require(now - data.timestamp <= MAX_DATA_AGE, ErrorCode.ORACLE_DATA_TOO_OLD)

    try:
        verify_oracle_signature(oracle.authority, data)
    except InsuranceError:
        update_oracle_health(oracle, False, now)
        raise

    if oracle.latest_data is not None:
        require(data.nonce > oracle.latest_data.nonce, ErrorCode.INVALID_ORACLE_DATA)

    oracle.latest_data = data
    oracle.last_update_timestamp = now
    oracle.update_count += 1
    update_oracle_health(oracle, True, now)


def verify_oracle_signature(oracle_authority: str, data: OracleData) -> None:
    """Reject a reading whose signature is all zeros."""
    create_oracle_message(data)
    require(any(data.signature), ErrorCode.ORACLE_SIGNATURE_INVALID)


def create_oracle_message(data: OracleData) -> bytes:
    """The signed message: value, timestamp, confidence and nonce, little-endian."""
    return _MESSAGE_LAYOUT.pack(data.value, data.timestamp, data.confidence, data.nonce)


def parse_pyth_format(raw_data: bytes) -> OracleData:
    """Read value, timestamp and confidence from the first 24 bytes."""
    require(len(raw_data) >= _PYTH_READING.size, ErrorCode.INVALID_ORACLE_DATA)
    value, timestamp, confidence = _PYTH_READING.unpack_from(raw_data)
    return OracleData(value=value, timestamp=timestamp, confidence=confidence)


def validate_pyth_price_data(price_account_data: bytes, expected_product_id: bytes) -> bool:
    """Check the account is large enough and starts with the Pyth magic number."""
    require(len(price_account_data) >= PYTH_MIN_ACCOUNT_SIZE, ErrorCode.INVALID_ORACLE_DATA)
    (magic,) = struct.unpack_from("<I", price_account_data)
    require(magic == PYTH_MAGIC, ErrorCode.INVALID_ORACLE_DATA)
    return True


def extract_pyth_price_data(price_account_data: bytes) -> tuple[int, int, int]:
    """Return (price, confidence, timestamp) from a Pyth price account."""
    validate_pyth_price_data(price_account_data, bytes(32))
    require(len(price_account_data) >= _PYTH_PRICE_END, ErrorCode.INVALID_ORACLE_DATA)
    price, confidence = struct.unpack_from("<qQ", price_account_data, 208)
    (timestamp,) = struct.unpack_from("<q", price_account_data, 256)
    return price, confidence, timestamp


def update_oracle_status(
    master_contract: MasterInsuranceContract, oracle: Oracle, admin: str, is_active: bool
) -> None:
    _require_admin(master_contract, admin)
    oracle.is_active = is_active


def get_consensus_data(
    master_contract: MasterInsuranceContract, oracles: Iterable[Oracle], now: int
) -> ConsensusData:
    """Aggregate fresh readings of active oracles, dropping outliers."""
    threshold = master_contract.min_consensus_threshold
    active = [o for o in oracles if o.is_active and o.latest_data is not None]
    require(len(active) >= threshold, ErrorCode.INSUFFICIENT_ORACLES)

    valid_values = [
        o.latest_data.value
        for o in active
        if now - o.latest_data.timestamp <= CONSENSUS_MAX_AGE
    ]
    require(len(valid_values) >= threshold, ErrorCode.INSUFFICIENT_ORACLES)

    filtered = remove_outliers(valid_values)
    require(len(filtered) >= threshold, ErrorCode.INSUFFICIENT_ORACLES)
    return ConsensusData.from_oracle_values(filtered, now)


def remove_outliers(values: Sequence[int]) -> list[int]:
    """Keep values within two integer standard deviations of the integer mean."""
    if len(values) <= 2:
        return list(values)
    mean = sum(values) // len(values)
    variance = sum((value - mean) ** 2 for value in values) // len(values)
    spread = 2 * math.isqrt(variance)
    lower = mean - spread if mean > spread else 0
    upper = mean + spread
    return [value for value in values if lower <= value <= upper]


def check_consensus_timeout(oracles: Iterable[Oracle], timeout_seconds: int, now: int) -> bool:
    """True if any active oracle has gone longer than ``timeout_seconds`` without updating."""
    return any(
        o.is_active and now - o.last_update_timestamp > timeout_seconds for o in oracles
    )


def validate_consensus_requirements(
    consensus: ConsensusData, min_confidence: int, min_oracles: int
) -> bool:
    require(consensus.confidence_score >= min_confidence, ErrorCode.ORACLE_CONSENSUS_FAILURE)
    require(consensus.oracle_count >= min_oracles, ErrorCode.INSUFFICIENT_ORACLES)
    return True


def validate_data_reasonableness(
    oracle: Oracle, new_data: OracleData, max_change_percentage: int
) -> bool:
    """Reject readings while the breaker is tripped, wild swings and zero confidence."""
    require(
        not oracle.health_metrics.circuit_breaker_active,
        ErrorCode.ORACLE_CONSENSUS_FAILURE,
    )
    if oracle.latest_data is not None:
        change = calculate_percentage_change(oracle.latest_data.value, new_data.value)
        require(change <= max_change_percentage, ErrorCode.INVALID_ORACLE_DATA)
    require(new_data.confidence > 0, ErrorCode.INVALID_ORACLE_DATA)
    return True


def calculate_percentage_change(old_value: int, new_value: int) -> int:
    """Absolute change in percent, capped at 100; 100 when starting from zero."""
    if old_value == 0:
        return 100
    percentage = abs(new_value - old_value) * 100 // old_value
    # The percentage is narrowed to 8 bits before the cap is applied.
    return min(percentage & 0xFF, 100)


def update_oracle_health(oracle: Oracle, success: bool, current_timestamp: int) -> None:
    """Record an update outcome and adjust the oracle's reputation."""
    if success:
        oracle.health_metrics.record_successful_update(current_timestamp)
        oracle.reputation_score = min(100, oracle.reputation_score + 1)
    else:
        oracle.health_metrics.record_failed_validation(current_timestamp)
        oracle.reputation_score = max(0, oracle.reputation_score - 3)


def emergency_oracle_override(
    master_contract: MasterInsuranceContract,
    oracle: Oracle,
    admin: str,
    corrected_data: OracleData,
    reason: str,
    now: int,
) -> None:
    """Replace the oracle's reading and clear its breaker and failure count."""
    _require_admin(master_contract, admin)
    logger.warning(
        "Emergency oracle override - Oracle: %s, Reason: %s", oracle.oracle_id, reason
    )
    oracle.latest_data = corrected_data
    oracle.last_update_timestamp = now
    oracle.health_metrics.circuit_breaker_active = False
    oracle.health_metrics.failed_validations = 0


def check_oracle_system_health(oracles: Iterable[Oracle], min_healthy_oracles: int) -> bool:
    healthy = sum(
        1
        for o in oracles
        if o.is_active
        and not o.health_metrics.circuit_breaker_active
        and o.reputation_score >= HEALTHY_REPUTATION
    )
    require(healthy >= min_healthy_oracles, ErrorCode.INSUFFICIENT_ORACLES)
    return True


def reset_oracle_circuit_breaker(
    master_contract: MasterInsuranceContract, oracle: Oracle, admin: str
) -> None:
    _require_admin(master_contract, admin)
    oracle.health_metrics.circuit_breaker_active = False
    oracle.health_metrics.failed_validations = 0
    logger.info("Circuit breaker reset for oracle: %s", oracle.oracle_id)