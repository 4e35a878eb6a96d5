"""
Matching Engine - cross-notifications between possibly related lost/found reports.

DESIGN PRINCIPLES:
- Loose recall: a keyword matching anywhere inside another title counts
  ("wallet" matches "wallets"); a human decides whether it is really the item
- Short titles never match: only words longer than 3 characters are keywords
- One point-in-time scan per submission, not a live query
- Each notification is independent; one failed write never stops the scan
- No memory across submissions: re-submitting can notify again
"""

from pydantic import BaseModel, ValidationError
from typing import List, Optional, Set, Tuple
import logging

from app.core.settings import settings
from app.models.lost_found import LostFoundItem
from app.models.notification import NotificationCategory
from app.services.notification_hub import NotificationHub
from app.store.base import RemoteStore, TransientStoreError

logger = logging.getLogger(__name__)


class MatchResult(BaseModel):
    """One matched record and who was told about it."""
    record_id: str
    title: Optional[str] = None
    owner_id: str
    notified: List[str] = []


def extract_keywords(title: Optional[str], min_length: Optional[int] = None) -> Set[str]:
    """
    Lower-cased whitespace tokens of at least `min_length` characters.

    "Lost Brown Wallet" → {"lost", "brown", "wallet"}; "Lost Bag" → {"lost"}.
    """
    if min_length is None:
        min_length = settings.MATCH_MIN_KEYWORD_LENGTH
    if not title:
        return set()
    return {word for word in title.lower().split() if len(word) >= min_length}


class MatchingEngine:
    """Scans existing lost/found reports when a new one is submitted."""

    def __init__(self, store: RemoteStore, hub: NotificationHub, collection: Optional[str] = None):
        self.store = store
        self.hub = hub
        self.collection = collection or settings.COLLECTION_LOST_FOUND

    def find_matches(self, new_record_id: str, keywords: Set[str]) -> List[LostFoundItem]:
        """
        Every other report whose title contains any keyword as a substring.

        The new report is excluded by id only, so an identical title filed by
        someone else still matches.
        """
        matched = []
        for doc in self.store.read_once(self.collection):
            if doc.id == new_record_id:
                continue
            try:
                item = LostFoundItem.from_document(doc)
            except ValidationError as e:
                logger.warning(f"Skipping malformed report {doc.id}: {e}")
                continue
            item_title = (item.title or "").lower()
            if any(keyword in item_title for keyword in keywords):
                matched.append(item)
        return matched

    def on_submit(self, new_record_id: str, new_title: str, submitter_id: str) -> List[MatchResult]:
        """
        Notify the submitter, and each matched report's owner, about possible matches.

        Returns:
            One MatchResult per matched report (empty when nothing matched or
            the scan could not run)
        """
        keywords = extract_keywords(new_title)
        if not keywords:
            logger.debug(f"No keywords in title '{new_title}', skipping match scan")
            return []

        try:
            matched = self.find_matches(new_record_id, keywords)
        except TransientStoreError as e:
            logger.warning(f"Match scan for {new_record_id} could not read '{self.collection}': {e}")
            return []

        notified_pairs: Set[Tuple[str, str]] = set()
        results = []

        for item in matched:
            result = MatchResult(record_id=item.id, title=item.title, owner_id=item.owner_id)

            messages = [(submitter_id, f'Possible match found! "{item.title}" may match your report.')]
            if item.owner_id and item.owner_id != submitter_id:
                messages.append((item.owner_id, f'Possible match for your item! Check "{new_title}".'))

            for recipient_id, message in messages:
                pair = (recipient_id, item.id)
                if pair in notified_pairs:
                    continue
                notified_pairs.add(pair)

                try:
                    if self.hub.create(recipient_id, message, NotificationCategory.MATCH):
                        result.notified.append(recipient_id)
                except Exception as e:
                    logger.error(f"Match notification to {recipient_id} failed: {e}", exc_info=True)

            results.append(result)

        if results:
            logger.info(f"Report {new_record_id} matched {len(results)} existing report(s)")
        return results
