from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


# Blood group options
BLOODGROUP_CHOICES = (
    ('A+', 'A+'),
    ('A-', 'A-'),
    ('B+', 'B+'),
    ('B-', 'B-'),
    ('AB+', 'AB+'),
    ('AB-', 'AB-'),
    ('O+', 'O+'),
    ('O-', 'O-'),
)

BLOOD_GROUPS = [bg for bg, _ in BLOODGROUP_CHOICES]


# Organ / blood product types a donor can pledge
ORGAN_TYPE_CHOICES = (
    ('kidney', 'Kidney'),
    ('partial_liver', 'Partial Liver'),
    ('bone_marrow', 'Bone Marrow / Stem Cells'),
    ('blood_whole', 'Blood (Whole)'),
    ('blood_plasma', 'Blood (Plasma)'),
    ('blood_platelets', 'Blood (Platelets)'),
    ('partial_lung', 'Partial Lung (Rare)'),
    ('partial_pancreas', 'Partial Pancreas (Rare)'),
    ('skin', 'Skin (Medical Use)'),
    ('blood_vessels', 'Blood Vessels / Tissues'),
)

ORGAN_TYPES = [organ for organ, _ in ORGAN_TYPE_CHOICES]


ACTIVE = 'active'
PAUSED = 'paused'
UNAVAILABLE = 'unavailable'

AVAILABILITY_CHOICES = (
    (ACTIVE, 'Active'),
    (PAUSED, 'Paused'),
    (UNAVAILABLE, 'Unavailable'),
)


class Donor(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, null=True, blank=True)
    full_name = models.CharField(max_length=120)
    bloodgroup = models.CharField(max_length=10, choices=BLOODGROUP_CHOICES, null=True, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)

    # Location, used for proximity scoring
    state = models.CharField(max_length=100, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # Only field the matching engine writes to
    availability = models.CharField(
        max_length=20,
        choices=AVAILABILITY_CHOICES,
        default=ACTIVE,
        db_index=True
    )
    documents_verified = models.BooleanField(default=False)
    emergency_available = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    profile_updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Donor"
        verbose_name_plural = "Donors"
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.full_name} - {self.bloodgroup}"

    @property
    def organ_types(self):
        return frozenset(p.organ_type for p in self.pledges.all())


class DonorOrgan(models.Model):
    """One organ or blood product a donor has pledged."""
    donor = models.ForeignKey(Donor, on_delete=models.CASCADE, related_name='pledges')
    organ_type = models.CharField(max_length=30, choices=ORGAN_TYPE_CHOICES)
    pledged_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('donor', 'organ_type')
        verbose_name = "Pledged Organ"
        verbose_name_plural = "Pledged Organs"

    def __str__(self):
        return f"{self.donor.full_name} pledges {self.get_organ_type_display()}"
