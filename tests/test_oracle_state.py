import pytest

from siglab.state.oracle import (
    ConsensusData,
    Oracle,
    OracleData,
    OracleHealthMetrics,
    OracleType,
)


def test_health_metrics_start_healthy():
    metrics = OracleHealthMetrics()
    assert metrics.accuracy_score == 100
    assert metrics.failed_validations == 0
    assert metrics.circuit_breaker_active is False


def test_successful_update_counts_and_caps_accuracy():
    metrics = OracleHealthMetrics()
    before = metrics.updates_24h
    metrics.record_successful_update(1234)
    assert metrics.updates_24h == before + 1
    assert metrics.last_health_check == 1234
    assert metrics.accuracy_score == 100


def test_successful_update_improves_low_accuracy():
    metrics = OracleHealthMetrics(accuracy_score=50)
    metrics.record_successful_update(10)
    assert metrics.accuracy_score == 51


def test_failed_validation_lowers_accuracy_by_five():
    metrics = OracleHealthMetrics()
    before = metrics.accuracy_score
    metrics.record_failed_validation(77)
    assert metrics.accuracy_score == before - 5
    assert metrics.failed_validations == 1
    assert metrics.last_health_check == 77


def test_accuracy_never_drops_below_zero():
    metrics = OracleHealthMetrics(accuracy_score=3)
    metrics.record_failed_validation(1)
    assert metrics.accuracy_score == 0


def test_circuit_breaker_trips_on_fifth_failure():
    metrics = OracleHealthMetrics()
    for moment in range(4):
        metrics.record_failed_validation(moment)
    assert metrics.circuit_breaker_active is False
    metrics.record_failed_validation(5)
    assert metrics.circuit_breaker_active is True


def test_reset_daily_metrics_forgives_good_oracle():
    metrics = OracleHealthMetrics(
        updates_24h=9, accuracy_score=90, failed_validations=6, circuit_breaker_active=True
    )
    metrics.reset_daily_metrics(500)
    assert metrics.updates_24h == 0
    assert metrics.last_health_check == 500
    assert metrics.failed_validations == 0
    assert metrics.circuit_breaker_active is False


def test_reset_daily_metrics_keeps_breaker_for_poor_oracle():
    metrics = OracleHealthMetrics(
        updates_24h=9, accuracy_score=80, failed_validations=6, circuit_breaker_active=True
    )
    metrics.reset_daily_metrics(500)
    assert metrics.updates_24h == 0
    assert metrics.failed_validations == 6
    assert metrics.circuit_breaker_active is True


@pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 15, 16, 17, 99, 10**12, 2**64 - 1])
def test_integer_sqrt_is_floor_root(n):
    root = ConsensusData.integer_sqrt(n)
    assert root * root <= n < (root + 1) * (root + 1)


def test_consensus_of_identical_values():
    consensus = ConsensusData.from_oracle_values([500, 500, 500], 42)
    assert consensus.aggregated_value == 500
    assert consensus.median_value == 500
    assert consensus.standard_deviation == 0
    assert consensus.confidence_score == 100
    assert consensus.oracle_count == 3
    assert consensus.consensus_timestamp == 42


def test_consensus_of_nothing_is_zero():
    consensus = ConsensusData.from_oracle_values([], 7)
    assert consensus.aggregated_value == 0
    assert consensus.median_value == 0
    assert consensus.confidence_score == 0
    assert consensus.oracle_count == 0


def test_median_odd_and_even():
    assert ConsensusData.from_oracle_values([10, 30, 20], 0).median_value == 20
    assert ConsensusData.from_oracle_values([30, 20, 10, 20], 0).median_value == 20


def test_zero_mean_gives_zero_confidence():
    assert ConsensusData.from_oracle_values([0, 0, 0], 0).confidence_score == 0


def test_wide_spread_gives_zero_confidence():
    consensus = ConsensusData.from_oracle_values([0, 1000], 0)
    assert consensus.confidence_score == 0


def test_confidence_stays_in_range():
    consensus = ConsensusData.from_oracle_values([90, 100, 110, 105], 0)
    assert 0 <= consensus.confidence_score <= 100
    assert consensus.standard_deviation >= 0


def test_oracle_defaults_match_registration():
    oracle = Oracle(oracle_id="feed-1", authority="authority-key")
    assert oracle.oracle_type is OracleType.PYTH
    assert oracle.is_active is True
    assert oracle.reputation_score == 100
    assert oracle.latest_data is None
    assert oracle.health_metrics.accuracy_score == 100


def test_oracle_space_covers_string_limits():
    assert Oracle.space() > 8 + Oracle.MAX_ORACLE_ID_LENGTH + Oracle.MAX_DATA_FEED_ADDRESS_LENGTH


def test_oracle_data_rejects_wrong_signature_length():
    with pytest.raises(ValueError):
        OracleData(value=1, timestamp=2, confidence=3, signature=b"\x01" * 10)


def test_oracle_data_default_signature_is_zeroed():
    data = OracleData(value=1, timestamp=2, confidence=3)
    assert data.signature == bytes(64)
    assert data.nonce == 0