"""
AllocationPolicy -- per-recipient-class caps on a single assignment.

Responsibility:
    Answers one question: given an item and a recipient, what is the largest
    quantity a single assignment may grant?  The answer is independent of
    stock; the ledger checks stock separately.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Policies are plain
    objects; the registry maps a recipient class tag to a policy.  The
    ledger depends only on ``AllocationPolicy.max_per_assignment`` so a new
    variant is added by registering it, never by editing the ledger.

Invariants enforced:
    - Every cap is a non-negative int (ValueError at construction).
    - One canonical cap table: ``AllocationPolicyRegistry.default()`` builds
      it from DEFAULT_CAPS, and configuration overrides it via ``from_caps``.

Failure modes:
    - PolicyNotConfiguredError from ``policy_for`` when a recipient class has
      no registered policy.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType

from donation_kernel.exceptions import PolicyNotConfiguredError
from donation_kernel.models.recipient import RecipientClass

DEFAULT_CAPS: Mapping[str, int] = MappingProxyType({
    RecipientClass.INDIVIDUAL.value: 5,
    RecipientClass.ORGANISATION.value: 20,
})


def _check_cap(cap: object) -> int:
    if isinstance(cap, bool) or not isinstance(cap, int):
        raise ValueError(f"Allocation cap must be an int, got {cap!r}")
    if cap < 0:
        raise ValueError(f"Allocation cap must be >= 0, got {cap}")
    return cap


class AllocationPolicy(ABC):
    """Rule returning the maximum quantity one assignment may grant."""

    name: str = "allocation_policy"

    @abstractmethod
    def max_per_assignment(self, item_id: int, recipient_id: int) -> int:
        ...


class FixedCapPolicy(AllocationPolicy):
    """Same cap for every item and recipient."""

    name = "fixed_cap"

    def __init__(self, cap: int):
        self._cap = _check_cap(cap)

    @property
    def cap(self) -> int:
        return self._cap

    def max_per_assignment(self, item_id: int, recipient_id: int) -> int:
        return self._cap

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cap={self._cap})"


class IndividualPolicy(FixedCapPolicy):
    """Cap for individual recipients."""

    name = "individual"

    def __init__(self, cap: int = DEFAULT_CAPS[RecipientClass.INDIVIDUAL.value]):
        super().__init__(cap)


class OrganisationPolicy(FixedCapPolicy):
    """Cap for organisations (community groups, shelters)."""

    name = "organisation"

    def __init__(self, cap: int = DEFAULT_CAPS[RecipientClass.ORGANISATION.value]):
        super().__init__(cap)


class PerItemCapPolicy(AllocationPolicy):
    """
    Wraps another policy and narrows the cap for selected items.

    An override never raises the cap above what the base policy allows.
    """

    name = "per_item_cap"

    def __init__(self, base: AllocationPolicy, overrides: Mapping[int, int]):
        self._base = base
        self._overrides = MappingProxyType(
            {int(item_id): _check_cap(cap) for item_id, cap in overrides.items()}
        )

    def max_per_assignment(self, item_id: int, recipient_id: int) -> int:
        base_cap = self._base.max_per_assignment(item_id, recipient_id)
        override = self._overrides.get(item_id)
        if override is None:
            return base_cap
        return min(base_cap, override)

    def __repr__(self) -> str:
        return f"PerItemCapPolicy(base={self._base!r}, overrides={dict(self._overrides)})"


_BUILTIN_POLICIES: dict[str, type[FixedCapPolicy]] = {
    RecipientClass.INDIVIDUAL.value: IndividualPolicy,
    RecipientClass.ORGANISATION.value: OrganisationPolicy,
}


class AllocationPolicyRegistry:
    """
    Maps recipient class tags to allocation policies.

    Usage:
        registry = AllocationPolicyRegistry.default()
        cap = registry.policy_for("individual").max_per_assignment(1, 1)
    """

    def __init__(self) -> None:
        self._policies: dict[str, AllocationPolicy] = {}

    @staticmethod
    def _key(recipient_class: RecipientClass | str) -> str:
        if isinstance(recipient_class, RecipientClass):
            return recipient_class.value
        return str(recipient_class).strip().lower()

    def register(
        self,
        recipient_class: RecipientClass | str,
        policy: AllocationPolicy,
    ) -> None:
        """Register (or replace) the policy for a recipient class."""
        self._policies[self._key(recipient_class)] = policy

    def policy_for(self, recipient_class: RecipientClass | str) -> AllocationPolicy:
        """
        Get the policy for a recipient class.

        Raises:
            PolicyNotConfiguredError: If no policy is registered.
        """
        key = self._key(recipient_class)
        try:
            return self._policies[key]
        except KeyError:
            raise PolicyNotConfiguredError(key) from None

    def registered_classes(self) -> tuple[str, ...]:
        return tuple(sorted(self._policies))

    @classmethod
    def from_caps(
        cls,
        caps: Mapping[str, int],
        item_caps: Mapping[int, int] | None = None,
    ) -> "AllocationPolicyRegistry":
        """
        Build a registry from a recipient-class -> cap table.

        Known classes get their named policy type; any other class tag gets
        a plain FixedCapPolicy.  When item_caps is given, every policy is
        wrapped in a PerItemCapPolicy with those overrides.
        """
        registry = cls()
        for recipient_class, cap in caps.items():
            key = cls._key(recipient_class)
            policy: AllocationPolicy = _BUILTIN_POLICIES.get(key, FixedCapPolicy)(cap)
            if item_caps:
                policy = PerItemCapPolicy(policy, item_caps)
            registry.register(key, policy)
        return registry

    @classmethod
    def default(cls) -> "AllocationPolicyRegistry":
        return cls.from_caps(DEFAULT_CAPS)
