"""
Application constants.

Centralized constants for the application.
"""

# ========================================================================
# CHAIN CONSTANTS
# ========================================================================

POLYGON_MAINNET_CHAIN_ID = 137

# Blocks behind the head treated as final on Polygon
POLYGON_SAFE_CONFIRMATIONS = 128

# Stablecoin used for donations (USDT on Polygon has 6 decimals)
USDT_DECIMALS = 6

# ========================================================================
# BLOCKCHAIN CONSTANTS
# ========================================================================

# Blockchain operation timeouts (in seconds)
BLOCKCHAIN_TIMEOUT = 30.0  # Standard blockchain operations (receipt, height)
BLOCKCHAIN_LONG_TIMEOUT = 120.0  # Long-running operations (unbounded log queries)
BLOCKCHAIN_RPC_TIMEOUT = 30  # RPC provider HTTP timeout
BLOCKCHAIN_EXECUTOR_WORKERS = 4  # Thread pool size for sync Web3 calls

# ========================================================================
# CURATION SYNC CONSTANTS
# ========================================================================

# Providers accept at most 2000 blocks per eth_getLogs call
CURATION_SYNC_RANGE_CAP = 2000
CURATION_SYNC_INTERVAL_MINUTES = 30

# ========================================================================
# PAY-TO VERIFICATION CONSTANTS
# ========================================================================

# First attempt after 5s, then 5s, 10s ... 320s between attempts (about 11 minutes)
PAY_TO_DELAY_SECONDS = 5.0
PAY_TO_MAX_ATTEMPTS = 8
PAY_TO_SWEEP_INTERVAL_SECONDS = 60
PAY_TO_SWEEP_BATCH_LIMIT = 100
PAY_TO_SWEEP_GRACE_SECONDS = 30  # Leave due jobs to their delayed message first

# ========================================================================
# DISTRIBUTED LOCK CONSTANTS
# ========================================================================

DISTRIBUTED_LOCK_TIMEOUT = 30  # Lock timeout in seconds
CURATION_SYNC_LOCK_TIMEOUT = 1800  # One sync interval
CURATION_SYNC_LOCK_NAME = "curation_sync"

# ========================================================================
# DRAMATIQ CONSTANTS
# ========================================================================

DRAMATIQ_TIME_LIMIT_STANDARD = 300_000  # 5 minutes
DRAMATIQ_TIME_LIMIT_LONG = 1_800_000  # 30 minutes

# ========================================================================
# NOTIFICATION CONSTANTS
# ========================================================================

TELEGRAM_TIMEOUT = 10.0  # Telegram API operations timeout

# Response cache key prefix used by the API layer
NODE_CACHE_KEY_PREFIX = "node"
