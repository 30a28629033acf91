"""
Allocation of the best eligible donor to one recipient request.

``allocate`` returns a persisted Match, or one of the expected outcomes
NoCandidate / Conflict. Only infrastructure faults (DatabaseError) and
malformed recipient rows (InvalidRecord) are raised.
"""
import logging
from dataclasses import dataclass

from django.utils import timezone

from patient.models import VERIFIED, RecipientRequest

from matching.conf import matching_settings
from matching.exceptions import ClaimConflict
from matching.records import Candidate, RecipientRecord
from matching.scanner import CandidateScanner
from matching.store import ProfileStore
from matching.utils.blood_compatibility import blood_tier, is_eligible
from matching.utils.scoring import ScoringContext, rank, score_breakdown, weighted_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoCandidate:
    recipient_id: int
    organ_type: str
    reason: str

    kind = 'no_candidate'


@dataclass(frozen=True)
class Conflict:
    recipient_id: int
    organ_type: str
    attempts: int
    reason: str

    kind = 'conflict'


class MatchAllocator:

    def __init__(self, store=None, scanner=None, clock=None):
        self.store = store or ProfileStore()
        self.scanner = scanner or CandidateScanner(self.store)
        self.clock = clock or timezone.now

    def _record(self, recipient):
        if isinstance(recipient, RecipientRecord):
            return recipient
        if not isinstance(recipient, RecipientRequest):
            recipient = self.store.get_recipient(recipient)
        return RecipientRecord.from_model(recipient)

    def find_candidates(self, recipient, config=None, exclude=()):
        """
        Ranked list of eligible donors for ``recipient``, best first.
        Read-only: nothing is reserved.
        """
        config = config or matching_settings()
        record = self._record(recipient)
        context = ScoringContext(
            now=self.clock(),
            oldest_request_at=self.store.oldest_waiting_request_at(record.required_organ),
        )

        candidates = []
        for donor in self.scanner.scan(record.required_organ):
            if donor.id in exclude or not is_eligible(donor, record, config):
                continue
            factors = score_breakdown(donor, record, context, config)
            candidates.append(Candidate(
                donor=donor,
                recipient=record,
                score=weighted_total(factors, config),
                blood_tier=blood_tier(donor.bloodgroup, record.bloodgroup, record.required_organ, config),
                factors=factors,
            ))
        return rank(candidates)

    def allocate(self, recipient):
        config = matching_settings()
        record = self._record(recipient)
        retries = config['CLAIM_RETRIES']
        lost = set()

        for attempt in range(1, retries + 1):
            ranked = self.find_candidates(record, config=config, exclude=lost)
            if not ranked:
                if lost:
                    return Conflict(record.id, record.required_organ, attempt - 1,
                                    "eligible donors were claimed concurrently")
                return NoCandidate(record.id, record.required_organ, self._no_candidate_reason(record))

            best = ranked[0]
            try:
                match = self.store.claim(best.donor.id, record.id, record.required_organ, best.score)
            except ClaimConflict as e:
                logger.warning(f"Attempt {attempt}/{retries} for recipient {record.id} lost: {e.reason}")
                lost.add(best.donor.id)
                try:
                    record = self._record(self.store.get_recipient(record.id))
                except RecipientRequest.DoesNotExist:
                    return Conflict(record.id, record.required_organ, attempt, "recipient request was removed")
                continue

            logger.info(f"Recipient {record.id} matched with donor {best.donor.id} (score {best.score})")
            return match

        return Conflict(record.id, record.required_organ, retries, "claim retries exhausted")

    @staticmethod
    def _no_candidate_reason(record):
        if not record.verified:
            return "recipient documents are not verified"
        if record.status != VERIFIED:
            return f"recipient request is {record.status}"
        return "no eligible donor available"
