import pytest

from siglab.constants import MAX_COVERAGE_AMOUNT, MIN_PREMIUM_AMOUNT
from siglab.errors import ErrorCode, InsuranceError
from siglab.instructions.policy import CreatePolicyParams, create_policy, pay_premium
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.policy import (
    ComparisonOperator,
    InsuranceType,
    OracleConfig,
    PolicyStatus,
    PremiumFrequency,
    TriggerConditions,
)

HOLDER = "holder-pubkey"
NOW = 1000


def make_master(**overrides):
    values = dict(authority="admin-pubkey", reserve_ratio=20, max_oracles=5,
                  min_consensus_threshold=3)
    values.update(overrides)
    return MasterInsuranceContract(**values)


def make_params(**overrides):
    values = dict(
        insurance_type=InsuranceType.WEATHER,
        coverage_amount=10_000_000,
        premium_amount=MIN_PREMIUM_AMOUNT,
        deductible=1_000_000,
        policy_duration_days=30,
        trigger_conditions=TriggerConditions(100.0, ComparisonOperator.GREATER_THAN),
        oracle_config=OracleConfig(oracle_address="oracle-pubkey"),
        risk_assessment_score=40,
        max_payout_per_incident=5_000_000,
        waiting_period_hours=2,
        premium_payment_frequency=PremiumFrequency.ANNUAL,
        auto_renewal=True,
        metadata='{"region": "north"}',
    )
    values.update(overrides)
    return CreatePolicyParams(**values)


def expect(code, func, *args):
    with pytest.raises(InsuranceError) as info:
        func(*args)
    assert info.value.code is code


def test_create_policy_sets_fields():
    master = make_master()
    params = make_params()
    policy = create_policy(master, HOLDER, params, NOW)
    assert policy.id == "POL-1000-0"
    assert policy.user == HOLDER
    assert policy.status is PolicyStatus.ACTIVE
    assert policy.start_date == NOW
    assert policy.end_date - policy.start_date == 30 * 86_400
    assert policy.last_premium_paid == NOW
    assert policy.premium_payment_frequency is PremiumFrequency.ANNUAL
    assert policy.metadata == params.metadata
    assert policy.payout_history == []


def test_create_policy_updates_master_counter():
    master = make_master()
    first = create_policy(master, HOLDER, make_params(), NOW)
    second = create_policy(master, HOLDER, make_params(), NOW + 5)
    assert master.active_policies_count == 2
    assert master.updated_at == NOW + 5
    assert first.id == "POL-1000-0"
    assert second.id == "POL-1005-1"


def test_create_policy_refused_when_paused():
    expect(ErrorCode.CONTRACT_PAUSED, create_policy, make_master(is_paused=True),
           HOLDER, make_params(), NOW)


@pytest.mark.parametrize("coverage", [0, MAX_COVERAGE_AMOUNT + 1])
def test_create_policy_coverage_bounds(coverage):
    params = make_params(coverage_amount=coverage, deductible=0, max_payout_per_incident=0)
    expect(ErrorCode.COVERAGE_EXCEEDS_MAXIMUM, create_policy, make_master(), HOLDER,
           params, NOW)


def test_create_policy_accepts_maximum_coverage():
    params = make_params(coverage_amount=MAX_COVERAGE_AMOUNT)
    policy = create_policy(make_master(), HOLDER, params, NOW)
    assert policy.coverage_amount == MAX_COVERAGE_AMOUNT


def test_create_policy_premium_too_small():
    expect(ErrorCode.INSUFFICIENT_PREMIUM, create_policy, make_master(), HOLDER,
           make_params(premium_amount=MIN_PREMIUM_AMOUNT - 1), NOW)


@pytest.mark.parametrize(
    "overrides",
    [
        {"deductible": 10_000_001},
        {"policy_duration_days": 0},
        {"policy_duration_days": 366},
        {"risk_assessment_score": 101},
        {"max_payout_per_incident": 10_000_001},
    ],
)
def test_create_policy_invalid_parameters(overrides):
    master = make_master()
    expect(ErrorCode.INVALID_PARAMETERS, create_policy, master, HOLDER,
           make_params(**overrides), NOW)
    assert master.active_policies_count == 0


def test_pay_premium_records_payment():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    pay_premium(master, policy, HOLDER, MIN_PREMIUM_AMOUNT, NOW + 10)
    pay_premium(master, policy, HOLDER, MIN_PREMIUM_AMOUNT * 2, NOW + 20)
    assert master.total_premiums_collected == MIN_PREMIUM_AMOUNT * 3
    assert policy.last_premium_paid == NOW + 20
    assert policy.updated_at == NOW + 20
    assert master.updated_at == NOW + 20


def test_pay_premium_paused():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    master.is_paused = True
    expect(ErrorCode.CONTRACT_PAUSED, pay_premium, master, policy, HOLDER,
           MIN_PREMIUM_AMOUNT, NOW)


def test_pay_premium_inactive_policy():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    policy.status = PolicyStatus.CANCELLED
    expect(ErrorCode.POLICY_NOT_ACTIVE, pay_premium, master, policy, HOLDER,
           MIN_PREMIUM_AMOUNT, NOW)


def test_pay_premium_after_end_date():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    pay_premium(master, policy, HOLDER, MIN_PREMIUM_AMOUNT, policy.end_date)
    expect(ErrorCode.POLICY_EXPIRED, pay_premium, master, policy, HOLDER,
           MIN_PREMIUM_AMOUNT, policy.end_date + 1)


def test_pay_premium_below_policy_premium():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    expect(ErrorCode.INSUFFICIENT_PREMIUM, pay_premium, master, policy, HOLDER,
           MIN_PREMIUM_AMOUNT - 1, NOW)


def test_pay_premium_wrong_payer():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    expect(ErrorCode.UNAUTHORIZED, pay_premium, master, policy, "someone-else",
           MIN_PREMIUM_AMOUNT, NOW)
    assert master.total_premiums_collected == 0


def test_pay_premium_overflow():
    master = make_master()
    policy = create_policy(master, HOLDER, make_params(), NOW)
    master.total_premiums_collected = 2**64 - 1
    expect(ErrorCode.MATH_OVERFLOW, pay_premium, master, policy, HOLDER,
           MIN_PREMIUM_AMOUNT, NOW)
    assert master.total_premiums_collected == 2**64 - 1