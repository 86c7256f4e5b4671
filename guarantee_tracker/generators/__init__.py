"""Sample data generators."""

from guarantee_tracker.generators.guarantee import GuaranteeGenerator

__all__ = ["GuaranteeGenerator"]
