# matching/utils/scoring.py
"""
Desirability score of an eligible (donor, recipient) pair.

Every factor is normalised to [0, 1] and multiplied by its configured weight.
The functions here are pure: the current time and the oldest waiting request
are passed in through ScoringContext rather than read from the clock or the
database.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from patient.models import CRITICAL

from matching.conf import matching_settings
from matching.utils.blood_compatibility import blood_tier
from matching.utils.geolocation import proximity


@dataclass(frozen=True)
class ScoringContext:
    now: datetime
    # created_at of the oldest request still waiting for the same organ type
    oldest_request_at: Optional[datetime] = None


def urgency_factor(recipient, config):
    return config['URGENCY_SCORES'].get(recipient.urgency, 0.0)


def blood_factor(donor, recipient, config):
    tier = blood_tier(donor.bloodgroup, recipient.bloodgroup, recipient.required_organ, config)
    return config['BLOOD_TIER_SCORES'].get(tier, 0.0)


def wait_factor(recipient, context):
    if context.oldest_request_at is None:
        return 1.0
    longest_wait = (context.now - context.oldest_request_at).total_seconds()
    if longest_wait <= 0:
        return 1.0
    waited = (context.now - recipient.created_at).total_seconds()
    return min(1.0, max(0.0, waited / longest_wait))


def emergency_factor(donor, recipient):
    return 1.0 if recipient.urgency == CRITICAL and donor.emergency_available else 0.0


def age_factor(donor, recipient):
    if donor.age is None or recipient.age is None:
        return 0.5
    diff = abs(donor.age - recipient.age)
    if diff < 10:
        return 1.0
    if diff < 20:
        return 0.5
    return 0.0


def recency_factor(donor, context, config):
    updated_at = donor.profile_updated_at or donor.created_at
    days = (context.now - updated_at).total_seconds() / 86400
    horizon = config['RECENCY_HORIZON_DAYS']
    return min(1.0, max(0.0, 1.0 - days / horizon))


def score_breakdown(donor, recipient, context, config=None):
    config = config or matching_settings()
    return {
        'urgency': urgency_factor(recipient, config),
        'blood': blood_factor(donor, recipient, config),
        'wait': wait_factor(recipient, context),
        'proximity': proximity(donor, recipient, config['PROXIMITY_RADIUS_KM']),
        'emergency': emergency_factor(donor, recipient),
        'age': age_factor(donor, recipient),
        'recency': recency_factor(donor, context, config),
    }


def weighted_total(factors, config):
    weights = config['WEIGHTS']
    total = sum(weights.get(name, 0.0) * value for name, value in factors.items())
    return round(total, 6)


def score(donor, recipient, context, config=None):
    """Weighted sum of the normalised factors, higher is better."""
    config = config or matching_settings()
    return weighted_total(score_breakdown(donor, recipient, context, config), config)


def ranking_key(candidate):
    """
    Sort key giving a total order: best score first, then the recipient who
    has waited longest, then the lowest donor id.
    """
    return (-candidate.score, candidate.recipient.created_at, candidate.recipient.id, candidate.donor.id)


def rank(candidates):
    return sorted(candidates, key=ranking_key)
