from datetime import timedelta

import pytest
from django.contrib.auth.models import Permission, User

from donor.models import Donor, DonorOrgan
from patient.models import RecipientRequest

from tests.factories import NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def make_donor(db):
    def _make(organs=('kidney',), bloodgroup='O-', availability='active', verified=True,
              created_at=None, **kwargs):
        created_at = created_at or NOW - timedelta(days=30)
        kwargs.setdefault('full_name', 'Test Donor')
        kwargs.setdefault('profile_updated_at', created_at)
        donor = Donor.objects.create(
            bloodgroup=bloodgroup,
            availability=availability,
            documents_verified=verified,
            created_at=created_at,
            **kwargs
        )
        for organ in organs:
            DonorOrgan.objects.create(donor=donor, organ_type=organ)
        return donor
    return _make


@pytest.fixture
def make_recipient(db):
    def _make(required_organ='kidney', bloodgroup='AB+', urgency='critical', verified=True,
              status='verified', created_at=None, **kwargs):
        kwargs.setdefault('patient_name', 'Test Recipient')
        return RecipientRequest.objects.create(
            required_organ=required_organ,
            bloodgroup=bloodgroup,
            urgency=urgency,
            documents_verified=verified,
            status=status,
            created_at=created_at or NOW - timedelta(days=10),
            **kwargs
        )
    return _make


@pytest.fixture
def operator(db):
    return User.objects.create_superuser('operator', 'operator@example.com', 'secret-pass')


@pytest.fixture
def staff_user(db):
    return User.objects.create_user('staff', 'staff@example.com', 'secret-pass', is_staff=True)


@pytest.fixture
def batch_permission(db):
    return Permission.objects.get(codename='run_batch_allocation', content_type__app_label='matching')
