# distributions/models/__init__.py

from .distribution import Distribution, DistributionLot
from .usage import UsageRecord
from .waste import WasteLot, WasteRecord

__all__ = [
    "Distribution",
    "DistributionLot",
    "WasteRecord",
    "WasteLot",
    "UsageRecord",
]
