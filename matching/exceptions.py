from django.core.exceptions import ValidationError


class InvalidRecord(ValidationError):
    """A donor or recipient row is missing or has a malformed matching field."""

    def __init__(self, message, record_id=None):
        super().__init__(message)
        self.record_id = record_id


class ClaimConflict(Exception):
    """The claim lost a race: donor or recipient no longer eligible at write time."""

    def __init__(self, donor_id, recipient_id, reason):
        super().__init__(f"Claim of donor {donor_id} for recipient {recipient_id} failed: {reason}")
        self.donor_id = donor_id
        self.recipient_id = recipient_id
        self.reason = reason
