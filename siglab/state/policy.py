"""Insurance policy records and their supporting types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class InsuranceType(Enum):
    WEATHER = "Weather"
    EARTHQUAKE = "Earthquake"
    FLIGHT = "Flight"
    CROP = "Crop"
    CUSTOM = "Custom"


class PolicyStatus(Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"
    PENDING_PAYOUT = "PendingPayout"
    PAID_OUT = "PaidOut"


class PremiumFrequency(Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUAL = "Annual"


class ComparisonOperator(Enum):
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"


@dataclass
class TriggerConditions:
    """Threshold test applied to oracle data to decide whether a payout is due."""

    threshold_value: float
    comparison_operator: ComparisonOperator
    data_source: str = ""
    grace_period: int = 0


@dataclass
class OracleConfig:
    """Where a policy's oracle data comes from and how fresh it must be."""

    oracle_address: str
    data_feed_id: str = ""
    required_confirmations: int = 0
    staleness_threshold: int = 0


@dataclass
class PayoutRecord:
    amount: int
    timestamp: int
    transaction_id: str
    oracle_data: str


@dataclass
class Policy:
    """A parametric insurance policy held by one user."""

    id: str
    user: str
    insurance_type: InsuranceType
    coverage_amount: int
    premium_amount: int
    deductible: int
    start_date: int
    end_date: int
    trigger_conditions: TriggerConditions
    oracle_config: OracleConfig
    status: PolicyStatus = PolicyStatus.ACTIVE
    last_premium_paid: int = 0
    payout_history: list[PayoutRecord] = field(default_factory=list)
    risk_assessment_score: int = 0
    max_payout_per_incident: int = 0
    waiting_period_hours: int = 0
    premium_payment_frequency: PremiumFrequency = PremiumFrequency.MONTHLY
    auto_renewal: bool = False
    metadata: str = ""
    created_at: int = 0
    updated_at: int = 0