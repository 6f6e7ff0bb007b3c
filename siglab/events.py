"""Events recorded by the insurance contract's instructions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MasterContractInitialized:
    admin: str
    treasury_mint: str
    reserve_ratio: int
    timestamp: int


@dataclass(frozen=True)
class PolicyCreated:
    policy_id: int
    owner: str
    insurance_type: int
    coverage_amount: int
    premium_amount: int
    expiry_timestamp: int


@dataclass(frozen=True)
class PremiumPaid:
    policy_id: int
    payer: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class PayoutTriggered:
    policy_id: str
    beneficiary: str
    amount: int
    oracle_value: int
    timestamp: int


@dataclass(frozen=True)
class OracleDataUpdated:
    oracle: str
    data_type: str
    value: int
    timestamp: int


@dataclass(frozen=True)
class ContractPaused:
    admin: str
    timestamp: int


@dataclass(frozen=True)
class ContractResumed:
    admin: str
    timestamp: int


@dataclass(frozen=True)
class TreasuryWithdrawn:
    admin: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class PayoutExecuted:
    policy_id: str
    beneficiary: str
    amount: int
    transaction_signature: str
    timestamp: int


@dataclass(frozen=True)
class PayoutApproved:
    policy_id: str
    admin: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class PayoutRejected:
    policy_id: str
    admin: str
    reason: str
    timestamp: int


@dataclass(frozen=True)
class ReserveRatioUpdated:
    admin: str
    old_ratio: int
    new_ratio: int
    timestamp: int