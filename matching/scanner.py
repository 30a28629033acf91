import logging

from matching.exceptions import InvalidRecord
from matching.records import DonorRecord
from matching.store import ProfileStore

logger = logging.getLogger(__name__)


class CandidateScanner:
    """
    Reads the current donor pool for an organ type.

    Every call to ``scan`` queries storage again; results are never cached
    between calls.
    """

    def __init__(self, store=None):
        self.store = store or ProfileStore()

    def scan(self, organ_type):
        for donor in self.store.list_eligible_donors(organ_type):
            try:
                yield DonorRecord.from_model(donor)
            except InvalidRecord as e:
                logger.warning(f"Skipping donor {donor.pk} while scanning {organ_type}: {e.message}")
