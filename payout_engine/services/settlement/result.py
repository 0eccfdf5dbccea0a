"""Settlement run result."""

from dataclasses import dataclass


@dataclass
class SettlementResult:
    """Counts of one settlement run."""

    processed_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
