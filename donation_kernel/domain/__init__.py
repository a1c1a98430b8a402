"""
Pure domain layer.

Clock abstraction, allocation policies, and immutable DTOs.  Nothing here
opens a session or touches the database.
"""

from donation_kernel.domain.allocation_policy import (
    DEFAULT_CAPS,
    AllocationPolicy,
    AllocationPolicyRegistry,
    FixedCapPolicy,
    IndividualPolicy,
    OrganisationPolicy,
    PerItemCapPolicy,
)
from donation_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from donation_kernel.domain.dtos import (
    DistributionInfo,
    DistributionView,
    DonationInfo,
    ItemInfo,
    RecipientInfo,
)

__all__ = [
    "AllocationPolicy",
    "AllocationPolicyRegistry",
    "FixedCapPolicy",
    "IndividualPolicy",
    "OrganisationPolicy",
    "PerItemCapPolicy",
    "DEFAULT_CAPS",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ItemInfo",
    "RecipientInfo",
    "DonationInfo",
    "DistributionInfo",
    "DistributionView",
]
