"""
Django ORM persistence for the matching engine.

``claim`` is the only writer. It re-checks eligibility on locked rows and
writes the Match together with the donor and recipient state changes in one
transaction; the partial unique constraints on Match back it up when two
claims race on a database without row locks.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Case, Count, FloatField, Min, Q, Value, When

from donor.models import ACTIVE, UNAVAILABLE, Donor
from patient.models import MATCHED, VERIFIED, WAITING_STATUSES, RecipientRequest

from matching.conf import capacity_for, is_renewable, matching_settings
from matching.exceptions import ClaimConflict, InvalidRecord
from matching.models import OPEN_STATUSES, Match
from matching.records import DonorRecord, RecipientRecord
from matching.utils.blood_compatibility import is_eligible

logger = logging.getLogger(__name__)


class ProfileStore:

    def __init__(self, config=None):
        self._config = config

    @property
    def config(self):
        return self._config or matching_settings()

    def list_eligible_donors(self, organ_type):
        """
        Active, verified donors who pledged ``organ_type`` and still have
        capacity for it. Returns a lazy iterator over Donor rows.
        """
        config = self.config
        donors = Donor.objects.filter(
            availability=ACTIVE,
            documents_verified=True,
            pledges__organ_type=organ_type,
        )

        if is_renewable(organ_type, config):
            donors = donors.annotate(
                open_claims=Count(
                    'matches',
                    filter=Q(matches__organ_type=organ_type, matches__status__in=OPEN_STATUSES),
                    distinct=True
                )
            ).filter(open_claims__lt=capacity_for(organ_type, config))
        else:
            donors = donors.exclude(
                pk__in=Match.objects.filter(
                    renewable=False,
                    status__in=OPEN_STATUSES,
                ).values('donor_id')
            )

        return donors.order_by('id').prefetch_related('pledges').iterator(chunk_size=200)

    def get_recipient(self, recipient_id):
        return RecipientRequest.objects.get(pk=recipient_id)

    def list_verified_recipients(self):
        """
        Verified requests in allocation order: most urgent first, then the
        longest waiting, then the lowest id.
        """
        priority = Case(
            *[When(urgency=urgency, then=Value(weight)) for urgency, weight in self.config['URGENCY_SCORES'].items()],
            default=Value(0.0),
            output_field=FloatField()
        )
        return RecipientRequest.objects.filter(
            status=VERIFIED,
            documents_verified=True,
        ).annotate(priority=priority).order_by('-priority', 'created_at', 'id')

    def oldest_waiting_request_at(self, organ_type):
        return RecipientRequest.objects.filter(
            required_organ=organ_type,
            status__in=WAITING_STATUSES,
        ).aggregate(oldest=Min('created_at'))['oldest']

    def claim(self, donor_id, recipient_id, organ_type, score):
        """
        Atomically reserve the donor for the recipient and return the new Match.

        Raises ClaimConflict if either party stopped being eligible since the
        scan, or if a concurrent claim got there first.
        """
        config = self.config
        renewable = is_renewable(organ_type, config)

        try:
            with transaction.atomic():
                try:
                    donor = Donor.objects.select_for_update().get(pk=donor_id)
                    recipient = RecipientRequest.objects.select_for_update().get(pk=recipient_id)
                except (Donor.DoesNotExist, RecipientRequest.DoesNotExist):
                    raise ClaimConflict(donor_id, recipient_id, "donor or recipient no longer exists")

                try:
                    donor_record = DonorRecord.from_model(donor)
                except InvalidRecord:
                    raise ClaimConflict(donor_id, recipient_id, "donor record is malformed")
                recipient_record = RecipientRecord.from_model(recipient)
                if recipient_record.required_organ != organ_type:
                    raise ClaimConflict(donor_id, recipient_id, "recipient now needs a different organ type")
                if not is_eligible(donor_record, recipient_record, config):
                    raise ClaimConflict(donor_id, recipient_id, "no longer eligible")

                if renewable:
                    open_claims = Match.objects.filter(
                        donor_id=donor_id,
                        organ_type=organ_type,
                        status__in=OPEN_STATUSES,
                    ).count()
                    if open_claims >= capacity_for(organ_type, config):
                        raise ClaimConflict(donor_id, recipient_id, "donor is at capacity")

                match = Match.objects.create(
                    donor_id=donor_id,
                    recipient_id=recipient_id,
                    organ_type=organ_type,
                    renewable=renewable,
                    score=score,
                )

                if not renewable:
                    updated = Donor.objects.filter(pk=donor_id, availability=ACTIVE).update(availability=UNAVAILABLE)
                    if updated != 1:
                        raise ClaimConflict(donor_id, recipient_id, "donor availability changed")

                updated = RecipientRequest.objects.filter(pk=recipient_id, status=VERIFIED).update(status=MATCHED)
                if updated != 1:
                    raise ClaimConflict(donor_id, recipient_id, "recipient status changed")
        except IntegrityError as e:
            raise ClaimConflict(donor_id, recipient_id, f"constraint violated ({e})")

        logger.info(f"Claimed donor {donor_id} for recipient {recipient_id} ({organ_type}), match {match.pk}")
        return match
