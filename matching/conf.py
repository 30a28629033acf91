"""
Matching engine policy.

Everything here can be overridden from the ``ORGAN_MATCHING`` Django setting.
Nested dicts are merged key by key so a project can change one weight without
restating the rest. Settings are read on every call; nothing is cached.
"""
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


DEFAULTS = {
    # organ type -> compatibility category
    'PRODUCT_CATEGORIES': {
        'blood_whole': 'whole_blood',
        'blood_plasma': 'plasma',
        'blood_platelets': 'platelets',
        'bone_marrow': 'marrow',
        'kidney': 'solid_organ',
        'partial_liver': 'solid_organ',
        'partial_lung': 'solid_organ',
        'partial_pancreas': 'solid_organ',
        'skin': 'solid_organ',
        'blood_vessels': 'solid_organ',
    },
    # category -> compatibility matrix name
    'CATEGORY_RULES': {
        'whole_blood': 'red_cell',
        'solid_organ': 'red_cell',
        'marrow': 'red_cell',
        'plasma': 'plasma',
        'platelets': 'platelets',
    },
    # renewable organ type -> open matches a donor may hold at once.
    # Anything missing here is non-renewable.
    'RENEWABLE_CAPACITY': {
        'blood_whole': 1,
        'blood_plasma': 1,
        'blood_platelets': 1,
        'bone_marrow': 1,
    },
    'BLOOD_TIER_SCORES': {
        'exact': 1.0,
        'compatible': 0.6,
        'permitted': 0.2,
    },
    'URGENCY_SCORES': {
        'critical': 1.0,
        'high': 0.75,
        'medium': 0.5,
        'low': 0.25,
    },
    'WEIGHTS': {
        'urgency': 0.3,
        'blood': 0.25,
        'wait': 0.2,
        'proximity': 0.1,
        'emergency': 0.05,
        'age': 0.05,
        'recency': 0.05,
    },
    'RECENCY_HORIZON_DAYS': 365,
    'PROXIMITY_RADIUS_KM': 500,
    'CLAIM_RETRIES': 3,
}


def matching_settings():
    """Return DEFAULTS merged with ``settings.ORGAN_MATCHING``."""
    overrides = getattr(settings, 'ORGAN_MATCHING', None) or {}
    unknown = set(overrides) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(f"Unknown ORGAN_MATCHING keys: {', '.join(sorted(unknown))}")

    config = {}
    for key, default in DEFAULTS.items():
        value = overrides.get(key, default)
        if isinstance(default, dict):
            merged = dict(default)
            merged.update(value)
            value = merged
        config[key] = value

    _validate(config)
    return config


def _validate(config):
    weights = config['WEIGHTS']
    unknown = set(weights) - set(DEFAULTS['WEIGHTS'])
    if unknown:
        raise ImproperlyConfigured(f"Unknown scoring weights: {', '.join(sorted(unknown))}")
    for name, weight in weights.items():
        if weight < 0:
            raise ImproperlyConfigured(f"Scoring weight '{name}' must not be negative.")

    for organ, capacity in config['RENEWABLE_CAPACITY'].items():
        if capacity < 1:
            raise ImproperlyConfigured(f"Capacity for '{organ}' must be at least 1.")

    if config['CLAIM_RETRIES'] < 1:
        raise ImproperlyConfigured("CLAIM_RETRIES must be at least 1.")


def is_renewable(organ_type, config=None):
    config = config or matching_settings()
    return organ_type in config['RENEWABLE_CAPACITY']


def capacity_for(organ_type, config=None):
    config = config or matching_settings()
    return config['RENEWABLE_CAPACITY'].get(organ_type, 1)
