"""
Plain value types the matching engine works on.

ORM rows are converted once, at the storage boundary, so the compatibility
and scoring functions never see a model instance or a half-filled row.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional

from donor.models import BLOOD_GROUPS, ORGAN_TYPES
from patient.models import URGENCY_CHOICES

from matching.exceptions import InvalidRecord


URGENCY_TIERS = [u for u, _ in URGENCY_CHOICES]


@dataclass(frozen=True)
class DonorRecord:
    id: int
    bloodgroup: str
    organ_types: FrozenSet[str]
    availability: str
    verified: bool
    created_at: datetime
    profile_updated_at: Optional[datetime] = None
    age: Optional[int] = None
    state: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    emergency_available: bool = False

    @classmethod
    def from_model(cls, donor):
        if donor.bloodgroup not in BLOOD_GROUPS:
            raise InvalidRecord(f"Donor {donor.pk} has invalid blood group {donor.bloodgroup!r}.", donor.pk)
        organ_types = donor.organ_types
        unknown = organ_types - set(ORGAN_TYPES)
        if unknown:
            raise InvalidRecord(f"Donor {donor.pk} pledges unknown organ types {sorted(unknown)}.", donor.pk)

        return cls(
            id=donor.pk,
            bloodgroup=donor.bloodgroup,
            organ_types=organ_types,
            availability=donor.availability,
            verified=donor.documents_verified,
            created_at=donor.created_at,
            profile_updated_at=donor.profile_updated_at,
            age=donor.age,
            state=donor.state or '',
            latitude=donor.latitude,
            longitude=donor.longitude,
            emergency_available=donor.emergency_available,
        )


@dataclass(frozen=True)
class RecipientRecord:
    id: int
    required_organ: str
    bloodgroup: str
    urgency: str
    verified: bool
    status: str
    created_at: datetime
    age: Optional[int] = None
    state: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_model(cls, recipient):
        if recipient.required_organ not in ORGAN_TYPES:
            raise InvalidRecord(
                f"Recipient {recipient.pk} has invalid organ type {recipient.required_organ!r}.", recipient.pk
            )
        if recipient.bloodgroup not in BLOOD_GROUPS:
            raise InvalidRecord(
                f"Recipient {recipient.pk} has invalid blood group {recipient.bloodgroup!r}.", recipient.pk
            )
        if recipient.urgency not in URGENCY_TIERS:
            raise InvalidRecord(
                f"Recipient {recipient.pk} has invalid urgency {recipient.urgency!r}.", recipient.pk
            )

        return cls(
            id=recipient.pk,
            required_organ=recipient.required_organ,
            bloodgroup=recipient.bloodgroup,
            urgency=recipient.urgency,
            verified=recipient.documents_verified,
            status=recipient.status,
            created_at=recipient.created_at,
            age=recipient.age,
            state=recipient.state or '',
            latitude=recipient.latitude,
            longitude=recipient.longitude,
        )


@dataclass(frozen=True)
class Candidate:
    """An eligible donor for one recipient, with its score."""
    donor: DonorRecord
    recipient: RecipientRecord
    score: float
    blood_tier: str
    factors: dict = field(default_factory=dict, compare=False)

    def as_dict(self):
        return {
            'donor_id': self.donor.id,
            'bloodgroup': self.donor.bloodgroup,
            'score': self.score,
            'blood_tier': self.blood_tier,
            'factors': dict(self.factors),
        }
