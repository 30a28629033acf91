from django.db import models
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.utils import timezone

from donor.models import BLOODGROUP_CHOICES, ORGAN_TYPE_CHOICES


CRITICAL = 'critical'

URGENCY_CHOICES = (
    (CRITICAL, 'Critical'),
    ('high', 'High'),
    ('medium', 'Medium'),
    ('low', 'Low'),
)

PENDING = 'pending'
UNDER_REVIEW = 'under_review'
VERIFIED = 'verified'
MATCHED = 'matched'

REQUEST_STATUS_CHOICES = (
    (PENDING, 'Pending'),
    (UNDER_REVIEW, 'Under Review'),
    (VERIFIED, 'Verified'),
    (MATCHED, 'Matched'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
    ('completed', 'Completed'),
    ('cancelled', 'Cancelled'),
)

# Requests still waiting for an organ; used to normalise wait time
WAITING_STATUSES = (PENDING, UNDER_REVIEW, VERIFIED)


class RecipientRequest(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='recipient_requests'
    )
    patient_name = models.CharField(max_length=120)
    age = models.PositiveIntegerField(null=True, blank=True)

    bloodgroup = models.CharField(max_length=10, choices=BLOODGROUP_CHOICES, null=True, blank=True)
    required_organ = models.CharField(max_length=30, choices=ORGAN_TYPE_CHOICES, null=True, blank=True)
    urgency = models.CharField(max_length=20, choices=URGENCY_CHOICES, default='medium')

    state = models.CharField(max_length=100, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    documents_verified = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=REQUEST_STATUS_CHOICES,
        default=PENDING,
        db_index=True
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Recipient Request"
        verbose_name_plural = "Recipient Requests"
        ordering = ['created_at', 'id']

    def save(self, *args, **kwargs):
        if self.status not in dict(REQUEST_STATUS_CHOICES):
            raise ValidationError(f"Invalid status value: {self.status}")

        super().save(*args, **kwargs)

    def __str__(self):
        return f"Request by {self.patient_name} for {self.required_organ} ({self.bloodgroup}) - {self.status}"
