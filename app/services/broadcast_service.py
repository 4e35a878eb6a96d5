"""
Broadcast Service - admin announcements fanned out one notification per account.
"""

from pydantic import ValidationError
from typing import Optional
import logging

from app.core.settings import settings
from app.models.notification import BroadcastResult, NotificationCategory
from app.models.user import Session, UserAccount
from app.services.notification_hub import NotificationHub
from app.store.base import RemoteStore, TransientStoreError

logger = logging.getLogger(__name__)


class BroadcastService:
    """Sends an info notification to every account of one role."""

    def __init__(self, store: RemoteStore, hub: NotificationHub, session: Session):
        self.store = store
        self.hub = hub
        self.session = session

    def broadcast(self, message: str, role: Optional[str] = None) -> BroadcastResult:
        """
        One independent create() per recipient; a failed recipient is counted
        and skipped, never retried, and never blocks the rest.

        Raises:
            PermissionError: if the session is not an admin
        """
        if not self.session.is_admin:
            raise PermissionError(f"User {self.session.user_id} may not broadcast announcements")

        role = role or settings.BROADCAST_ROLE
        try:
            accounts = self.store.read_once(settings.COLLECTION_USERS, {"role": role})
        except TransientStoreError as e:
            logger.warning(f"Broadcast aborted, could not read '{settings.COLLECTION_USERS}': {e}")
            return BroadcastResult()

        result = BroadcastResult(recipients=len(accounts))
        for doc in accounts:
            try:
                account = UserAccount.from_document(doc)
            except ValidationError as e:
                logger.warning(f"Skipping malformed account {doc.id}: {e}")
                result.failed += 1
                continue

            if self.hub.create(account.id, message, NotificationCategory.INFO):
                result.delivered += 1
            else:
                result.failed += 1

        logger.info(
            f"Broadcast by {self.session.user_id} to role '{role}': "
            f"{result.delivered} delivered, {result.failed} failed"
        )
        return result
