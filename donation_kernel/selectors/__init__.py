"""Read-only query selectors."""

from donation_kernel.selectors.base import BaseSelector
from donation_kernel.selectors.distribution_selector import DistributionSelector

__all__ = [
    "BaseSelector",
    "DistributionSelector",
]
