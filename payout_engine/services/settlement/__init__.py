"""
Monthly settlement services.

Deferred investment bonus release and recurring investment ROI.
"""

from payout_engine.services.settlement.pending_bonus_settlement import (
    PendingBonusSettlement,
)
from payout_engine.services.settlement.result import SettlementResult
from payout_engine.services.settlement.roi_settlement import RoiSettlement


__all__ = ["PendingBonusSettlement", "RoiSettlement", "SettlementResult"]
