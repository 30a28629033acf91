"""
Bulk allocation over every verified recipient request.

Safe to run again at any time: matched recipients drop out of the scan, so a
second run only works through what is left of the backlog.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError

from matching.allocator import MatchAllocator
from matching.exceptions import InvalidRecord
from matching.gateways import AuditGateway, NotificationGateway
from matching.models import Match
from matching.store import ProfileStore

logger = logging.getLogger(__name__)

BATCH_PERMISSION = 'matching.run_batch_allocation'


@dataclass
class BatchSummary:
    created: int = 0
    total_eligible: int = 0
    failures: List[Tuple[int, str]] = field(default_factory=list)

    def as_dict(self):
        return {
            'created': self.created,
            'total_eligible': self.total_eligible,
            'failures': [
                {'recipient_id': recipient_id, 'reason': reason}
                for recipient_id, reason in self.failures
            ],
        }


def authorize_batch_run(actor):
    """Raise PermissionDenied unless ``actor`` may run the batch allocation."""
    if actor is None or not actor.is_active or not actor.has_perm(BATCH_PERMISSION):
        raise PermissionDenied("You do not have permission to run batch allocation.")


class BatchCoordinator:

    def __init__(self, allocator=None, store=None, notifier=None, auditor=None):
        self.store = store or ProfileStore()
        self.allocator = allocator or MatchAllocator(store=self.store)
        self.notifier = notifier or NotificationGateway()
        self.auditor = auditor or AuditGateway()

    def run_all(self, actor):
        authorize_batch_run(actor)

        recipients = list(self.store.list_verified_recipients())
        summary = BatchSummary(total_eligible=len(recipients))
        logger.info(f"Batch allocation started by {actor.username}: {len(recipients)} verified recipient(s)")

        for recipient in recipients:
            try:
                outcome = self.allocator.allocate(recipient)
            except InvalidRecord as e:
                logger.warning(f"Skipping recipient {recipient.pk}: {e.message}")
                summary.failures.append((recipient.pk, f"validation: {e.message}"))
                continue
            except DatabaseError as e:
                logger.error(f"Allocation for recipient {recipient.pk} failed: {e}", exc_info=True)
                summary.failures.append((recipient.pk, f"infrastructure: {e}"))
                continue

            if isinstance(outcome, Match):
                summary.created += 1
                self.notifier.match_proposed(outcome)
                self.auditor.record_allocation(outcome, actor)
            else:
                summary.failures.append((recipient.pk, f"{outcome.kind}: {outcome.reason}"))

        self.auditor.record_batch_run(summary, actor)
        logger.info(
            f"Batch allocation finished: {summary.created} created, "
            f"{len(summary.failures)} not matched out of {summary.total_eligible}"
        )
        return summary
