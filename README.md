# siglab

`siglab` keeps the books for parametric insurance. A policy pays out when
an oracle-reported value crosses a threshold. Nobody has to file a claim.
The whole ledger is held in memory:

- a **master contract** (`siglab.state.master_contract.MasterInsuranceContract`).
  It holds the administrator's authority, a pause switch, the reserve ratio
  in percent, policy counters and an oracle registry.
- **policies** (`siglab.state.policy.Policy`). Each has coverage, premium,
  deductible, duration, waiting period and `TriggerConditions`.
- **oracles** (`siglab.state.oracle.Oracle`). They feed `OracleData`
  readings that carry a signature and a nonce. Each oracle keeps health
  metrics, a reputation score and a circuit breaker. `ConsensusData`
  aggregates the readings of several oracles.
- **pending payouts** (`siglab.state.payout.PendingPayout`). A payout is
  triggered, approved where needed, queued by priority and then executed.
- a **treasury** (`siglab.state.treasury.Treasury`). It tracks USDC and SOL
  balances, premiums, payouts, coverage exposure and a reserve ratio in
  basis points. `FinancialReport.from_treasury` takes a snapshot of it.

When a rule is broken, the package raises `siglab.errors.InsuranceError`.
The error's `code` attribute is an `ErrorCode` member, for example
`ErrorCode.CONTRACT_PAUSED`, `ErrorCode.UNAUTHORIZED`,
`ErrorCode.INSUFFICIENT_PREMIUM`, `ErrorCode.ORACLE_DATA_STALE` or
`ErrorCode.RESERVE_RATIO_VIOLATION`. The error's message is the code's
`message`, and `number` gives its numeric code, counted from 6000.
`siglab.errors.require(condition, code)` raises the error when the condition
does not hold.

## Installation

`siglab` needs Python 3.10 or later. It depends only on the standard library.
To run the tests, install the `test` extra (pytest) and run `pytest`.

## Using the whole program

`siglab.program.InsuranceProgram` puts every operation behind one object.
It holds the accounts as attributes:

- `master_contract` and `treasury`;
- `policies`, `pending_payouts` and `oracles`, which are dicts keyed by
  policy id or oracle id;
- `balances`, which maps account keys to lamports;
- `events`, a list of the events that the operations emitted.

Pass a `clock`: a callable that returns the current Unix timestamp. If you
leave it out, the system time is used. Every operation is atomic. If it
raises, all state is restored to what it was before the call.

```python
from siglab.instructions.admin import InitializeParams
from siglab.program import InsuranceProgram
from siglab.state.treasury import TokenType

program = InsuranceProgram(clock=lambda: 1_700_000_000)
program.initialize_master_contract(
    "admin-key",
    InitializeParams(reserve_ratio=20, max_oracles=5, min_consensus_threshold=3),
)
program.initialize_treasury("admin-key", minimum_reserve_ratio=2000)
program.deposit_funds("depositor-key", 5_000_000, TokenType.SOL)
```

The operations are:

- `initialize_master_contract`, `pause_contract`, `resume_contract`,
  `update_reserve_ratio`, `withdraw_treasury` and `transfer_authority`;
- `create_policy` and `pay_premium`;
- `trigger_payout`, `approve_payout` and `execute_payout`;
- `register_oracle`, `unregister_oracle`, `update_oracle_data`,
  `update_oracle_status`, `emergency_oracle_override` and
  `reset_oracle_circuit_breaker`;
- `initialize_treasury`, `deposit_funds`, `withdraw_funds` and
  `update_treasury_balance`.

`trigger_payout` needs `master_contract.treasury_account` to be set to
something other than `siglab.constants.DEFAULT_PUBKEY`, and no operation
sets it. Assign it yourself. `execute_payout` then moves lamports from that
key to the beneficiary in `balances`. Fund the key in `balances` first.

## Using the pieces directly

Each operation is also a plain function under `siglab.instructions`. The
modules are `admin`, `policy`, `payout`, `oracle` and `treasury`. The
functions take the state objects and the current time explicitly:

```python
from siglab.errors import InsuranceError
from siglab.instructions.treasury import deposit_funds, initialize_treasury, withdraw_funds
from siglab.state.treasury import TokenType, WithdrawalReason

now = 1_700_000_000
treasury = initialize_treasury("admin-key", minimum_reserve_ratio=2000, now=now)  # 20%

deposit_funds(treasury, 5_000_000, TokenType.USDC, now)
print(treasury.calculate_reserve_ratio())  # 10000 basis points while there is no exposure
print(treasury.available_liquidity())      # 5000000

try:
    withdraw_funds(treasury, "admin-key", 10_000_000, TokenType.USDC,
                   WithdrawalReason.ADMIN_WITHDRAWAL, now)
except InsuranceError as err:
    print(err.code)  # ErrorCode.INSUFFICIENT_TREASURY
```

Consensus over oracle values uses integer arithmetic:

```python
from siglab.state.oracle import ConsensusData

consensus = ConsensusData.from_oracle_values([100, 102, 98], timestamp=now)
print(consensus.aggregated_value, consensus.median_value, consensus.confidence_score)
# 100 100 99
```

`siglab.instructions.payout` also has helpers for the payout queue:
`get_next_payout_batch`, `cleanup_expired_payouts`, `get_queue_statistics`,
`add_to_payout_queue`, `remove_from_queue` and `validate_queue_health`.
`siglab.instructions.oracle` has `parse_pyth_format` and
`extract_pyth_price_data`, which read raw price data.

## Main rules

- Coverage must be between 1 and `MAX_COVERAGE_AMOUNT`, and the premium
  must be at least `MIN_PREMIUM_AMOUNT`. Both limits are in
  `siglab.constants`. A policy lasts from 1 to 365 days. The deductible and
  the maximum payout per incident may not exceed the coverage.
- A payout can be triggered only under all of these conditions:
  - the policy is active and has not ended;
  - its waiting period has passed;
  - its trigger condition holds.
- The payout amount is the coverage scaled by severity, minus the
  deductible, capped at the maximum per incident.
- A payout larger than a tenth of the premiums collected needs an
  administrator's approval before it can be executed. A pending payout
  expires 24 hours after it is triggered.
- An oracle update is rejected in any of these cases:
  - the oracle is inactive, or its circuit breaker is tripped;
  - the value moves more than 50% from the last reading;
  - the confidence is zero;
  - the data is older than five minutes;
  - the signature is all zeros;
  - the nonce does not increase.
- Five failed signature checks trip an oracle's circuit breaker.
- An administrator's withdrawal may take only what lies above the reserve
  that the current coverage exposure requires.

## What it does not do

`siglab` keeps everything in memory and stores nothing. It moves no real
tokens: the treasury's balances and the `balances` dict are only numbers. A
signature is checked only for being non-zero, with no cryptographic check.
The package has no command line and no server.