"""
Notification Hub - creation, live delivery and read-state of notifications.

DESIGN PRINCIPLES:
- Delivery is best-effort: a failed notification never fails the action that
  triggered it
- `read` flips one way only (unread → read)
- Mark-all-read is one atomic batch, so subscribers never see half of it
- No batch-broadcast primitive: callers fan out one create() per recipient
"""

from typing import Optional
import logging

from app.core.settings import settings
from app.models.notification import MarkReadResult, Notification, NotificationCategory
from app.services.collection_sync import CollectionSync, Subscription, UpdateCallback
from app.store.base import RemoteStore, TransientStoreError, WriteOperation

logger = logging.getLogger(__name__)


class NotificationHub:
    """Per-recipient notifications over the notifications collection."""

    def __init__(self, store: RemoteStore, collection: Optional[str] = None):
        self.store = store
        self.collection = collection or settings.COLLECTION_NOTIFICATIONS
        self.sync = CollectionSync(store, self.collection, Notification)

    def create(
        self,
        recipient_id: str,
        message: str,
        category: NotificationCategory = NotificationCategory.INFO
    ) -> Optional[str]:
        """
        Append an unread notification for `recipient_id`.

        Never raises: failures are logged and reported as None.

        Returns:
            The new notification id, or None if the write failed
        """
        try:
            notification_id = self.store.write(self.collection, {
                "recipient_id": recipient_id,
                "message": message,
                "category": NotificationCategory(category).value,
                "read": False,
            })
            logger.debug(f"Notification {notification_id} ({category}) created for {recipient_id}")
            return notification_id
        except Exception as e:
            logger.error(f"Failed to create notification for {recipient_id}: {e}", exc_info=True)
            return None

    def subscribe(self, recipient_id: str, on_update: UpdateCallback) -> Subscription:
        """Live, newest-first notifications of one recipient."""
        return self.sync.subscribe({"recipient_id": recipient_id}, on_update)

    def mark_all_read(self, recipient_id: str) -> MarkReadResult:
        """
        Flip every currently-unread notification of the recipient to read.

        One point-in-time query, then one atomic batch. Calling it again right
        away finds nothing unread and writes nothing.
        """
        try:
            unread = self.store.read_once(self.collection, {"recipient_id": recipient_id, "read": False})
            if not unread:
                return MarkReadResult(updated=0)

            self.store.batch_write([
                WriteOperation(collection=self.collection, record_id=doc.id, fields={"read": True})
                for doc in unread
            ])
            logger.info(f"Marked {len(unread)} notification(s) read for {recipient_id}")
            return MarkReadResult(updated=len(unread))

        except TransientStoreError as e:
            logger.warning(f"Mark-all-read failed for {recipient_id}: {e}")
            return MarkReadResult(updated=0, error=str(e))

    def mark_one_read(self, notification_id: str, recipient_id: Optional[str] = None) -> MarkReadResult:
        """
        Flip one notification to read. Repeating it has no further effect.

        With `recipient_id`, the notification must belong to that recipient.
        """
        try:
            if recipient_id is not None:
                owned = self.store.read_once(self.collection, {"recipient_id": recipient_id})
                if notification_id not in {doc.id for doc in owned}:
                    return MarkReadResult(updated=0, missing=True, error=f"Notification {notification_id} not found")

            self.store.write(self.collection, {"read": True}, record_id=notification_id)
            return MarkReadResult(updated=1)
        except TransientStoreError as e:
            logger.warning(f"Mark-read failed for notification {notification_id}: {e}")
            return MarkReadResult(updated=0, error=str(e))
