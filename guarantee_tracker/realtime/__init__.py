"""Realtime change delivery and list reconciliation."""

from guarantee_tracker.realtime.reconciler import GuaranteeList, apply_change
from guarantee_tracker.realtime.subscription import (
    ChangeCallback,
    QueueSubscription,
    Subscription,
)

__all__ = [
    "ChangeCallback",
    "GuaranteeList",
    "QueueSubscription",
    "Subscription",
    "apply_change",
]
