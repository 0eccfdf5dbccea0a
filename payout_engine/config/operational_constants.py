"""
Operational constants for the compensation engine.

Technical constants used by jobs: lock timeouts and task time limits.
"""

# =============================================================================
# LOCK TIMEOUTS (seconds)
# =============================================================================
# Used by distributed_lock.py for Redis locks

# Medium operations (daily counter reset)
LOCK_TIMEOUT_MEDIUM = 60

# Settlement runs
LOCK_TIMEOUT_EXTENDED = 600


# =============================================================================
# BLOCKING TIMEOUTS (seconds)
# =============================================================================
# How long to wait for lock acquisition

BLOCKING_TIMEOUT_DEFAULT = 5.0


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Medium tasks (2 minutes) - daily pair counter reset
DRAMATIQ_TIME_LIMIT_MEDIUM = 120_000

# Long tasks (10 minutes) - monthly settlement
DRAMATIQ_TIME_LIMIT_LONG = 600_000
