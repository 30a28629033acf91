from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction

from donor.models import Donor
from matching.allocator import Conflict, MatchAllocator, NoCandidate
from matching.exceptions import ClaimConflict, InvalidRecord
from matching.models import Match
from matching.store import ProfileStore
from patient.models import RecipientRequest

from tests.factories import NOW


pytestmark = pytest.mark.django_db

PINNED_WEIGHTS = {'urgency': 0.4, 'blood': 0.4, 'wait': 0.2, 'proximity': 0.0, 'emergency': 0.0, 'age': 0.0, 'recency': 0.0}


class RacingStore(ProfileStore):
    """Lets a rival allocation commit between this allocation's scan and its claim."""

    def __init__(self, rival):
        super().__init__()
        self.rival = rival
        self.rival_outcome = None

    def claim(self, donor_id, recipient_id, organ_type, score):
        if self.rival is not None:
            rival, self.rival = self.rival, None
            self.rival_outcome = rival()
        return super().claim(donor_id, recipient_id, organ_type, score)


class TestAllocate:

    def test_exact_match_outranks_universal_donor(self, settings, make_donor, make_recipient, clock):
        settings.ORGAN_MATCHING = {
            'WEIGHTS': PINNED_WEIGHTS,
            'BLOOD_TIER_SCORES': {'exact': 1.0, 'compatible': 0.6},
        }
        d1 = make_donor(bloodgroup='O-', created_at=NOW - timedelta(days=5))
        d2 = make_donor(bloodgroup='AB+', created_at=NOW - timedelta(days=50))
        r1 = make_recipient(bloodgroup='AB+', urgency='critical')

        ranked = MatchAllocator(clock=clock).find_candidates(r1)
        assert [c.donor.id for c in ranked] == [d2.pk, d1.pk]
        assert ranked[0].score == pytest.approx(1.0)
        assert ranked[1].score == pytest.approx(0.84)

        match = MatchAllocator(clock=clock).allocate(r1)
        assert isinstance(match, Match)
        assert match.donor_id == d2.pk
        assert match.score == pytest.approx(1.0)

    def test_without_exact_preference_lowest_donor_id_wins(self, settings, make_donor, make_recipient, clock):
        settings.ORGAN_MATCHING = {
            'WEIGHTS': PINNED_WEIGHTS,
            'BLOOD_TIER_SCORES': {'exact': 1.0, 'compatible': 1.0},
        }
        d1 = make_donor(bloodgroup='O-', created_at=NOW - timedelta(days=5))
        make_donor(bloodgroup='AB+', created_at=NOW - timedelta(days=50))
        r1 = make_recipient(bloodgroup='AB+', urgency='critical')

        match = MatchAllocator(clock=clock).allocate(r1)
        assert match.donor_id == d1.pk

    def test_claim_updates_donor_and_recipient(self, make_donor, make_recipient, clock):
        donor = make_donor()
        recipient = make_recipient()

        match = MatchAllocator(clock=clock).allocate(recipient)

        assert match.status == 'proposed'
        assert match.organ_type == 'kidney'
        assert match.renewable is False
        donor.refresh_from_db()
        recipient.refresh_from_db()
        assert donor.availability == 'unavailable'
        assert recipient.status == 'matched'

    def test_no_candidate_leaves_pool_untouched(self, make_donor, make_recipient, clock):
        kidney_donor = make_donor(organs=('kidney',))
        r2 = make_recipient(required_organ='blood_platelets', bloodgroup='A+')

        outcome = MatchAllocator(clock=clock).allocate(r2)

        assert isinstance(outcome, NoCandidate)
        assert outcome.recipient_id == r2.pk
        assert outcome.organ_type == 'blood_platelets'
        assert Match.objects.count() == 0
        kidney_donor.refresh_from_db()
        r2.refresh_from_db()
        assert kidney_donor.availability == 'active'
        assert r2.status == 'verified'

    def test_unverified_recipient_gets_no_candidate(self, make_donor, make_recipient, clock):
        make_donor()
        recipient = make_recipient(status='under_review')

        outcome = MatchAllocator(clock=clock).allocate(recipient)

        assert isinstance(outcome, NoCandidate)
        assert 'under_review' in outcome.reason

    def test_same_winner_across_repeated_previews(self, make_donor, make_recipient, clock):
        for bloodgroup in ('O-', 'A-', 'AB-', 'AB+', 'O+'):
            make_donor(bloodgroup=bloodgroup)
        recipient = make_recipient(bloodgroup='AB+')
        allocator = MatchAllocator(clock=clock)

        winners = {allocator.find_candidates(recipient)[0].donor.id for _ in range(5)}
        assert len(winners) == 1

    def test_malformed_recipient_raises_validation_error(self, make_donor, make_recipient, clock):
        make_donor()
        recipient = make_recipient(bloodgroup=None)

        with pytest.raises(InvalidRecord):
            MatchAllocator(clock=clock).allocate(recipient)

    def test_allocate_by_id(self, make_donor, make_recipient, clock):
        make_donor()
        recipient = make_recipient()
        assert isinstance(MatchAllocator(clock=clock).allocate(recipient.pk), Match)


class TestConcurrentClaims:

    def test_two_allocations_for_one_donor_yield_one_match(self, make_donor, make_recipient, clock):
        donor = make_donor(bloodgroup='O-')
        first = make_recipient(bloodgroup='A+', patient_name='First')
        second = make_recipient(bloodgroup='B+', patient_name='Second')

        store = RacingStore(rival=lambda: MatchAllocator(clock=clock).allocate(second))
        outcome = MatchAllocator(store=store, clock=clock).allocate(first)

        assert isinstance(store.rival_outcome, Match)
        assert store.rival_outcome.recipient_id == second.pk
        assert isinstance(outcome, Conflict)
        assert Match.objects.filter(donor=donor).count() == 1
        first.refresh_from_db()
        assert first.status == 'verified'

    def test_losing_allocation_falls_back_to_next_donor(self, make_donor, make_recipient, clock):
        preferred = make_donor(bloodgroup='O+')
        fallback = make_donor(bloodgroup='O-')
        first = make_recipient(bloodgroup='O+')
        second = make_recipient(bloodgroup='O+')

        store = RacingStore(rival=lambda: MatchAllocator(clock=clock).allocate(second))
        outcome = MatchAllocator(store=store, clock=clock).allocate(first)

        assert store.rival_outcome.donor_id == preferred.pk
        assert isinstance(outcome, Match)
        assert outcome.donor_id == fallback.pk

    def test_recipient_claimed_elsewhere_returns_conflict(self, make_donor, make_recipient, clock):
        make_donor(bloodgroup='O-')
        recipient = make_recipient()

        def rival():
            RecipientRequest.objects.filter(pk=recipient.pk).update(status='matched')

        outcome = MatchAllocator(store=RacingStore(rival), clock=clock).allocate(recipient)

        assert isinstance(outcome, Conflict)
        assert Match.objects.count() == 0

    def test_donor_malformed_before_claim_is_skipped(self, make_donor, make_recipient, clock):
        broken = make_donor(bloodgroup='O-')
        fallback = make_donor(bloodgroup='O-')
        recipient = make_recipient()

        def rival():
            Donor.objects.filter(pk=broken.pk).update(bloodgroup=None)

        outcome = MatchAllocator(store=RacingStore(rival), clock=clock).allocate(recipient)

        assert isinstance(outcome, Match)
        assert outcome.donor_id == fallback.pk

    def test_retries_are_bounded(self, settings, make_donor, make_recipient, clock):
        settings.ORGAN_MATCHING = {'CLAIM_RETRIES': 2}
        for _ in range(4):
            make_donor()
        recipient = make_recipient()

        class AlwaysLosingStore(ProfileStore):
            calls = 0

            def claim(self, donor_id, recipient_id, organ_type, score):
                AlwaysLosingStore.calls += 1
                raise ClaimConflict(donor_id, recipient_id, "taken")

        outcome = MatchAllocator(store=AlwaysLosingStore(), clock=clock).allocate(recipient)

        assert isinstance(outcome, Conflict)
        assert outcome.attempts == 2
        assert AlwaysLosingStore.calls == 2


class TestStorageGuards:

    def test_database_rejects_second_open_match_for_solid_organ_donor(self, make_donor, make_recipient):
        donor = make_donor()
        Match.objects.create(donor=donor, recipient=make_recipient(), organ_type='kidney', renewable=False, score=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            Match.objects.create(donor=donor, recipient=make_recipient(), organ_type='kidney', renewable=False, score=1)

    def test_database_rejects_second_open_match_for_recipient(self, make_donor, make_recipient):
        recipient = make_recipient(required_organ='blood_whole')
        Match.objects.create(donor=make_donor(organs=('blood_whole',)), recipient=recipient,
                             organ_type='blood_whole', renewable=True, score=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            Match.objects.create(donor=make_donor(organs=('blood_whole',)), recipient=recipient,
                                 organ_type='blood_whole', renewable=True, score=1)

    def test_closed_match_frees_the_donor_slot(self, make_donor, make_recipient):
        donor = make_donor()
        Match.objects.create(donor=donor, recipient=make_recipient(), organ_type='kidney',
                             renewable=False, score=1, status='rejected')
        Match.objects.create(donor=donor, recipient=make_recipient(), organ_type='kidney', renewable=False, score=1)

        assert Match.objects.filter(donor=donor).count() == 2

    def test_claim_is_refused_when_availability_was_reset_behind_an_open_match(self, make_donor, make_recipient):
        donor = make_donor()
        Match.objects.create(donor=donor, recipient=make_recipient(), organ_type='kidney', renewable=False, score=1)
        late = make_recipient()

        with pytest.raises(ClaimConflict):
            ProfileStore().claim(donor.pk, late.pk, 'kidney', 0.5)

        late.refresh_from_db()
        assert late.status == 'verified'
        assert Match.objects.filter(recipient=late).count() == 0

    def test_claim_on_malformed_donor_is_a_conflict(self, make_donor, make_recipient):
        donor = make_donor()
        recipient = make_recipient()
        Donor.objects.filter(pk=donor.pk).update(bloodgroup=None)

        with pytest.raises(ClaimConflict) as excinfo:
            ProfileStore().claim(donor.pk, recipient.pk, 'kidney', 0.5)
        assert excinfo.value.reason == 'donor record is malformed'
        recipient.refresh_from_db()
        assert recipient.status == 'verified'

    def test_claim_rechecks_eligibility(self, make_donor, make_recipient):
        donor = make_donor()
        recipient = make_recipient()
        Donor.objects.filter(pk=donor.pk).update(availability='paused')

        with pytest.raises(ClaimConflict):
            ProfileStore().claim(donor.pk, recipient.pk, 'kidney', 0.5)
        assert Match.objects.count() == 0


class TestRenewableProducts:

    def test_donor_stays_active_until_capacity(self, settings, make_donor, make_recipient, clock):
        settings.ORGAN_MATCHING = {'RENEWABLE_CAPACITY': {'blood_whole': 2}}
        donor = make_donor(organs=('blood_whole',), bloodgroup='O-')
        recipients = [make_recipient(required_organ='blood_whole', bloodgroup='A+') for _ in range(3)]
        allocator = MatchAllocator(clock=clock)

        outcomes = [allocator.allocate(r) for r in recipients]

        assert [type(o) for o in outcomes] == [Match, Match, NoCandidate]
        assert all(o.renewable for o in outcomes[:2])
        donor.refresh_from_db()
        assert donor.availability == 'active'

    def test_claim_refuses_donor_at_capacity(self, make_donor, make_recipient):
        donor = make_donor(organs=('blood_plasma',), bloodgroup='AB+')
        Match.objects.create(donor=donor, recipient=make_recipient(required_organ='blood_plasma'),
                             organ_type='blood_plasma', renewable=True, score=1)
        recipient = make_recipient(required_organ='blood_plasma', bloodgroup='O+')

        with pytest.raises(ClaimConflict):
            ProfileStore().claim(donor.pk, recipient.pk, 'blood_plasma', 0.5)
