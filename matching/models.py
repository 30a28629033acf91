from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType

from donor.models import ORGAN_TYPE_CHOICES


PROPOSED = 'proposed'
APPROVED = 'approved'

MATCH_STATUS_CHOICES = (
    (PROPOSED, 'Proposed'),
    (APPROVED, 'Approved'),
    ('rejected', 'Rejected'),
    ('completed', 'Completed'),
    ('cancelled', 'Cancelled'),
)

# Matches that still hold the donor and the recipient
OPEN_STATUSES = (PROPOSED, APPROVED)


# ------------------------
# Match Model
# ------------------------
class Match(models.Model):
    donor = models.ForeignKey('donor.Donor', on_delete=models.PROTECT, related_name='matches')
    recipient = models.ForeignKey('patient.RecipientRequest', on_delete=models.CASCADE, related_name='matches')
    organ_type = models.CharField(max_length=30, choices=ORGAN_TYPE_CHOICES)

    # Copied from configuration at claim time so the database can enforce
    # the one-open-match rule for non-renewable organs.
    renewable = models.BooleanField(default=False)

    score = models.FloatField()
    status = models.CharField(max_length=20, choices=MATCH_STATUS_CHOICES, default=PROPOSED, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Match"
        verbose_name_plural = "Matches"
        ordering = ['-created_at', '-id']
        permissions = [
            ('run_batch_allocation', 'Can run batch donor allocation'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['donor'],
                condition=models.Q(renewable=False, status__in=OPEN_STATUSES),
                name='one_open_match_per_nonrenewable_donor'
            ),
            models.UniqueConstraint(
                fields=['recipient', 'organ_type'],
                condition=models.Q(status__in=OPEN_STATUSES),
                name='one_open_match_per_recipient_organ'
            ),
        ]

    def __str__(self):
        return f"Match #{self.pk}: donor {self.donor_id} -> recipient {self.recipient_id} ({self.organ_type}, {self.status})"


# ------------------------
# Notification Model
# ------------------------
class Notification(models.Model):
    title = models.CharField(max_length=100)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    # Donor or RecipientRequest
    recipient_content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, null=True, blank=True)
    recipient_object_id = models.PositiveIntegerField(null=True, blank=True)
    recipient = GenericForeignKey('recipient_content_type', 'recipient_object_id')

    match = models.ForeignKey(Match, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    action = models.CharField(max_length=20, blank=True, null=True)  # e.g. proposed
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        if self.recipient:
            return f"{self.title} for {self.recipient}"
        return f"{self.title} - No recipient specified"


# ------------------------
# Audit Log Model
# ------------------------
class AuditLog(models.Model):
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=50)  # e.g. match_proposed, batch_allocation_run
    entity = models.CharField(max_length=50)  # e.g. match, batch
    entity_id = models.CharField(max_length=50, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.action} on {self.entity} {self.entity_id} @ {self.created_at}"
