"""Error codes of the insurance contract and the exception that carries them."""

from __future__ import annotations

from enum import Enum

_FIRST_ERROR_NUMBER = 6000


class ErrorCode(Enum):
    """Every failure the contract can report, valued by its message."""

    # Core contract
    CONTRACT_PAUSED = "Contract is currently paused and cannot process transactions"
    UNAUTHORIZED = "Unauthorized access - caller does not have required permissions"
    INVALID_PARAMETERS = "Invalid parameters provided to the instruction"
    MATH_OVERFLOW = "Arithmetic operation resulted in overflow"

    # Policy management
    INSUFFICIENT_PREMIUM = "Premium amount is below the minimum required threshold"
    POLICY_EXPIRED = "Policy has expired and cannot be used for claims"
    POLICY_NOT_ACTIVE = "Policy is not in active status"
    POLICY_ALREADY_EXISTS = "Policy already exists with this ID"
    POLICY_NOT_FOUND = "Policy not found with the provided ID"
    COVERAGE_EXCEEDS_MAXIMUM = "Coverage amount exceeds the maximum allowed limit"
    INVALID_INSURANCE_TYPE = "Invalid insurance type specified"

    # Oracle data
    INVALID_ORACLE_DATA = "Oracle data is invalid or corrupted"
    ORACLE_DATA_STALE = "Oracle data is stale and beyond acceptable threshold"
    INSUFFICIENT_ORACLES = "Insufficient oracles for reaching consensus"
    ORACLE_SIGNATURE_INVALID = "Oracle signature verification failed"
    ORACLE_CONSENSUS_FAILURE = "Oracle consensus mechanism failed"
    ORACLE_NOT_REGISTERED = "Oracle is not registered in the system"
    ORACLE_INACTIVE = "Oracle is currently inactive"
    ORACLE_DATA_TOO_OLD = "Oracle data is too old and cannot be used"
    MAX_ORACLES_EXCEEDED = "Maximum number of oracles has been exceeded"
    ORACLE_ALREADY_REGISTERED = "Oracle is already registered"
    INVALID_INPUT = "Invalid input provided"

    # Financial operations
    INSUFFICIENT_TREASURY = "Insufficient treasury balance to process payout"
    INSUFFICIENT_RESERVES = "Insufficient reserves to maintain solvency requirements"
    RESERVE_RATIO_BELOW_MINIMUM = "Reserve ratio is below minimum required threshold"
    SOLVENCY_CHECK_FAILED = (
        "Solvency check failed - operation would violate financial constraints"
    )
    TREASURY_OPERATION_FAILED = "Treasury operation failed due to internal error"
    RESERVE_RATIO_VIOLATION = "Reserve ratio violation - operation exceeds allowed limits"
    INVALID_PREMIUM_AMOUNT = "Invalid premium amount - must be within acceptable range"

    # Payouts and claims
    PAYOUT_CONDITIONS_NOT_MET = "Payout conditions have not been met based on oracle data"
    CLAIM_ALREADY_PROCESSED = "Claim has already been processed for this policy"
    CLAIM_PERIOD_EXPIRED = "Claim period has expired"
    INVALID_CLAIM_AMOUNT = "Invalid claim amount requested"

    # Administration
    WITHDRAWAL_DELAY_NOT_MET = "Admin withdrawal delay period has not been met"
    CONTRACT_MUST_BE_PAUSED = "Operation requires contract to be paused"
    CONTRACT_MUST_BE_ACTIVE = "Operation requires contract to be active"
    INVALID_ADMIN_OPERATION = "Invalid admin operation parameters"

    @property
    def message(self) -> str:
        """Human-readable description of the error."""
        return self.value

    @property
    def number(self) -> int:
        """Numeric error code; custom errors are numbered from 6000 in declaration order."""
        return _NUMBERS[self]


_NUMBERS = {code: _FIRST_ERROR_NUMBER + index for index, code in enumerate(ErrorCode)}


class InsuranceError(Exception):
    """Raised when an instruction fails; carries the matching ErrorCode."""

    def __init__(self, code: ErrorCode) -> None:
        super().__init__(code.message)
        self.code = code

    def __repr__(self) -> str:
        return f"InsuranceError({self.code.name})"


def require(condition: object, code: ErrorCode) -> None:
    """Raise InsuranceError with ``code`` unless ``condition`` holds."""
    if not condition:
        raise InsuranceError(code)