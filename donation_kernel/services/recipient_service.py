"""
Service layer for the recipient directory.

Recipients are read-mostly.  The ledger only needs to know that a
recipient exists and which class it belongs to.
"""

from __future__ import annotations

from sqlalchemy import select

from donation_kernel.domain.dtos import RecipientInfo
from donation_kernel.exceptions import InvalidRecipientError, RecipientNotFoundError
from donation_kernel.logging_config import get_logger
from donation_kernel.models.recipient import Recipient, RecipientClass
from donation_kernel.services.base import BaseService

logger = get_logger("services.recipients")

_CONTACT_FIELDS = ("address", "gender", "phone", "email", "emergency_contact")


def resolve_recipient_class(value: RecipientClass | str) -> RecipientClass:
    if isinstance(value, RecipientClass):
        return value
    try:
        return RecipientClass((value or "").strip().lower())
    except ValueError:
        raise InvalidRecipientError(
            "recipient_class", f"unknown recipient class {value!r}"
        ) from None


def _clean_name(name: str | None) -> str:
    clean = (name or "").strip()
    if not clean:
        raise InvalidRecipientError("name", "must not be empty")
    return clean


class RecipientService(BaseService[Recipient]):
    """Service for managing recipients.  Returns RecipientInfo DTOs."""

    def _get_by_id(self, recipient_id: int) -> Recipient:
        recipient = self.session.get(Recipient, recipient_id)
        if recipient is None:
            raise RecipientNotFoundError(recipient_id)
        return recipient

    def get_recipient(self, recipient_id: int) -> RecipientInfo:
        """
        Get recipient by ID.

        Raises:
            RecipientNotFoundError: If the recipient doesn't exist.
        """
        return RecipientInfo.from_model(self._get_by_id(recipient_id))

    def exists(self, recipient_id: int) -> bool:
        return self.session.get(Recipient, recipient_id) is not None

    def create_recipient(
        self,
        name: str,
        recipient_class: RecipientClass | str = RecipientClass.INDIVIDUAL,
        address: str | None = None,
        gender: str | None = None,
        phone: str | None = None,
        email: str | None = None,
        emergency_contact: str | None = None,
    ) -> RecipientInfo:
        """
        Create a new recipient.

        Raises:
            InvalidRecipientError: Empty name or unknown recipient class.
        """
        recipient = Recipient(
            name=_clean_name(name),
            recipient_class=resolve_recipient_class(recipient_class).value,
            address=address,
            gender=gender,
            phone=phone,
            email=email,
            emergency_contact=emergency_contact,
        )
        self.session.add(recipient)
        self.session.flush()

        logger.info(
            "recipient_created",
            extra={
                "recipient_id": recipient.id,
                "recipient_class": recipient.recipient_class,
            },
        )
        return RecipientInfo.from_model(recipient)

    def update_recipient(self, recipient_id: int, **fields: str | None) -> RecipientInfo:
        """
        Update name, class, or contact details.

        Only the keyword arguments supplied are changed.

        Raises:
            RecipientNotFoundError: If the recipient doesn't exist.
            InvalidRecipientError: Unknown field, empty name, or unknown class.
        """
        recipient = self._get_by_id(recipient_id)

        for key, value in fields.items():
            if key == "name":
                recipient.name = _clean_name(value)
            elif key == "recipient_class":
                recipient.recipient_class = resolve_recipient_class(value).value
            elif key in _CONTACT_FIELDS:
                setattr(recipient, key, value)
            else:
                raise InvalidRecipientError(key, "not an updatable field")

        self.session.flush()
        logger.info(
            "recipient_updated",
            extra={"recipient_id": recipient_id, "fields": sorted(fields)},
        )
        return RecipientInfo.from_model(recipient)

    def list_recipients(self, name_like: str | None = None) -> list[RecipientInfo]:
        """List recipients ordered by id, optionally filtered by name substring."""
        stmt = select(Recipient)
        term = (name_like or "").strip()
        if term:
            stmt = stmt.where(Recipient.name.icontains(term, autoescape=True))
        stmt = stmt.order_by(Recipient.id)
        return [RecipientInfo.from_model(r) for r in self.session.execute(stmt).scalars()]
