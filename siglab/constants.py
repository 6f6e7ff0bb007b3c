"""Protocol-wide seeds, limits and default values."""

MASTER_CONTRACT_SEED = b"master_contract"
POLICY_SEED = b"policy"
ORACLE_SEED = b"oracle"
TREASURY_SEED = b"treasury"

MAX_ORACLES = 10
MIN_ORACLES_FOR_CONSENSUS = 3
ORACLE_UPDATE_INTERVAL = 300  # seconds

MIN_PREMIUM_AMOUNT = 1_000_000  # 0.001 SOL in lamports
MAX_COVERAGE_AMOUNT = 1_000_000_000_000  # 1000 SOL in lamports
MIN_RESERVE_RATIO = 20  # percent

ADMIN_WITHDRAWAL_DELAY = 86_400  # seconds

# The all-zero public key in its base58 form, used for "not set yet".
DEFAULT_PUBKEY = "1" * 32