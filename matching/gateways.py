"""
Side channels informed after a Match is created.

Both gateways are fire-and-forget: every write runs in its own savepoint and
a failure is logged, never raised back into the allocation.
"""
import logging

from django.contrib.contenttypes.models import ContentType
from django.db import DatabaseError, transaction

from matching.models import AuditLog, Notification

logger = logging.getLogger(__name__)


class NotificationGateway:

    def match_proposed(self, match):
        organ = match.get_organ_type_display()
        messages = [
            (match.donor, "New Match Proposed",
             f"You have been proposed as a {organ} donor for a verified recipient. A hospital will review the match."),
            (match.recipient, "Donor Found",
             f"A compatible {organ} donor has been proposed for your request. A hospital will review the match."),
        ]
        for recipient, title, message in messages:
            try:
                with transaction.atomic():
                    Notification.objects.create(
                        title=title,
                        message=message,
                        action='proposed',
                        match=match,
                        recipient_content_type=ContentType.objects.get_for_model(recipient.__class__),
                        recipient_object_id=recipient.pk,
                    )
                logger.info(f"Notification sent to {recipient.__class__.__name__} (ID: {recipient.pk}) for match {match.pk}")
            except DatabaseError as e:
                logger.error(
                    f"Failed to create notification for {recipient.__class__.__name__} (ID: {recipient.pk}) "
                    f"match {match.pk}: {e}"
                )


class AuditGateway:

    def _write(self, actor, action, entity, entity_id, metadata):
        try:
            with transaction.atomic():
                AuditLog.objects.create(
                    actor=actor,
                    action=action,
                    entity=entity,
                    entity_id=str(entity_id),
                    metadata=metadata,
                )
        except DatabaseError as e:
            logger.error(f"Failed to write audit log '{action}' for {entity} {entity_id}: {e}")

    def record_allocation(self, match, actor=None):
        self._write(actor, 'match_proposed', 'match', match.pk, {
            'donor_id': match.donor_id,
            'recipient_id': match.recipient_id,
            'organ_type': match.organ_type,
            'score': match.score,
            'created_at': match.created_at.isoformat() if match.created_at else None,
        })

    def record_batch_run(self, summary, actor=None):
        self._write(actor, 'batch_allocation_run', 'batch', '', summary.as_dict())
