"""
Registration Guard - at most one volunteer registration per (user, event).

DESIGN PRINCIPLES:
- Check-then-act against a point-in-time query; the store has no unique index
- A duplicate or an event outside the catalog is a normal rejection result, not an error
- KNOWN RACE: two concurrent attempts for the same key can both pass the
  check before either writes, leaving two registrations. Accepted as-is.
"""

from typing import Optional
import logging

from app.core.settings import settings
from app.models.volunteer import (
    REGISTERED_STATUS,
    RegistrationResult,
    VolunteerCreate,
    get_event,
)
from app.store.base import RemoteStore, TransientStoreError

logger = logging.getLogger(__name__)


class RegistrationGuard:
    """Volunteer sign-up with duplicate rejection."""

    def __init__(self, store: RemoteStore, collection: Optional[str] = None):
        self.store = store
        self.collection = collection or settings.COLLECTION_VOLUNTEERS

    def is_registered(self, user_id: str, event_id: str) -> bool:
        """
        Raises:
            TransientStoreError: if the check cannot be made
        """
        existing = self.store.read_once(self.collection, {"owner_id": user_id, "event_id": event_id})
        return len(existing) > 0

    def register(
        self,
        user_id: str,
        event_id: str,
        form: VolunteerCreate,
        user_name: Optional[str] = None
    ) -> RegistrationResult:
        """
        Register `user_id` for `event_id` unless already registered.

        Returns:
            RegistrationResult with accepted=False and reason "unknown_event" for
            an event outside the catalog, "already_registered" for a duplicate,
            or "store_unavailable" if the store failed
        """
        event = get_event(event_id)
        if event is None:
            logger.info(f"Registration of {user_id} rejected: unknown event {event_id}")
            return RegistrationResult(
                accepted=False,
                reason="unknown_event",
                message=f"Event {event_id} is not open for registration.",
            )

        try:
            if self.is_registered(user_id, event_id):
                logger.info(f"Duplicate registration rejected: user {user_id}, event {event_id}")
                return RegistrationResult(
                    accepted=False,
                    reason="already_registered",
                    message="You already registered for this event!",
                )

            registration_id = self.store.write(self.collection, {
                "owner_id": user_id,
                "owner_name": user_name,
                "event_id": event_id,
                "event_title": form.event_title or event.title,
                "name": form.name,
                "email": form.email,
                "phone": form.phone,
                "availability": form.availability,
                "skills": form.skills,
                "status": REGISTERED_STATUS,
            })

        except TransientStoreError as e:
            logger.warning(f"Registration of {user_id} for {event_id} failed: {e}")
            return RegistrationResult(
                accepted=False,
                reason="store_unavailable",
                message="Registration failed. Please try again.",
            )

        logger.info(f"Volunteer registration {registration_id}: user {user_id}, event {event_id}")
        return RegistrationResult(
            accepted=True,
            registration_id=registration_id,
            message="Volunteer registration successful!",
        )
