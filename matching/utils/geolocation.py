from math import radians, sin, cos, sqrt, atan2


def haversine(lat1, lon1, lat2, lon2):
    """
    Calculate distance in kilometers between two lat/lon points using the Haversine formula.
    """
    R = 6371.0  # Earth’s radius in km
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    distance = R * c
    return distance


def has_coordinates(record):
    return record.latitude is not None and record.longitude is not None


def proximity(donor, recipient, radius_km):
    """
    Closeness of donor and recipient in [0, 1].

    Uses coordinates when both sides have them; otherwise falls back to
    comparing states (same state 1.0, different 0.5). Unknown is 0.5.
    """
    if has_coordinates(donor) and has_coordinates(recipient):
        distance = haversine(donor.latitude, donor.longitude, recipient.latitude, recipient.longitude)
        return max(0.0, 1.0 - distance / radius_km)

    if donor.state and recipient.state:
        return 1.0 if donor.state.strip().lower() == recipient.state.strip().lower() else 0.5
    return 0.5
