# matching/utils/blood_compatibility.py
"""
Donor/recipient eligibility.

Blood group rules are kept as data: one table per matrix name, selected for an
organ type through the PRODUCT_CATEGORIES and CATEGORY_RULES settings.
"""
from donor.models import ACTIVE, BLOOD_GROUPS
from patient.models import VERIFIED

from matching.conf import matching_settings


EXACT = 'exact'
COMPATIBLE = 'compatible'
PERMITTED = 'permitted'

# donor blood group -> recipient blood groups it can give red cells to
RED_CELL_RECIPIENTS = {
    "O-": ["O-", "O+", "A-", "A+", "B-", "B+", "AB-", "AB+"],  # universal donor
    "O+": ["O+", "A+", "B+", "AB+"],
    "A-": ["A-", "A+", "AB-", "AB+"],
    "A+": ["A+", "AB+"],
    "B-": ["B-", "B+", "AB-", "AB+"],
    "B+": ["B+", "AB+"],
    "AB-": ["AB-", "AB+"],
    "AB+": ["AB+"],
}


def _mirror(table):
    """Donor X may give to Y in the mirrored table iff Y may give to X in ``table``."""
    return {
        donor: [recipient for recipient in BLOOD_GROUPS if donor in table[recipient]]
        for donor in BLOOD_GROUPS
    }


# Plasma is the mirror image of red cells: AB plasma is universal
PLASMA_RECIPIENTS = _mirror(RED_CELL_RECIPIENTS)


class CompatibilityMatrix:
    """
    Total function over the 8 blood groups.

    ``fallback`` allows every pairing outside the table at the PERMITTED tier
    (used for platelets, where ABO match is preferred but not required).
    """

    def __init__(self, name, recipients_by_donor, fallback=False):
        self.name = name
        self.fallback = fallback
        self._allowed = {
            donor: frozenset(recipients_by_donor.get(donor, []))
            for donor in BLOOD_GROUPS
        }

    def tier(self, donor_bloodgroup, recipient_bloodgroup):
        """Return EXACT, COMPATIBLE, PERMITTED or None for an ineligible pair."""
        if donor_bloodgroup not in self._allowed or recipient_bloodgroup not in BLOOD_GROUPS:
            return None
        if donor_bloodgroup == recipient_bloodgroup:
            return EXACT
        if recipient_bloodgroup in self._allowed[donor_bloodgroup]:
            return COMPATIBLE
        if self.fallback:
            return PERMITTED
        return None

    def is_compatible(self, donor_bloodgroup, recipient_bloodgroup):
        return self.tier(donor_bloodgroup, recipient_bloodgroup) is not None

    def donors_for(self, recipient_bloodgroup):
        return [bg for bg in BLOOD_GROUPS if self.is_compatible(bg, recipient_bloodgroup)]

    def recipients_for(self, donor_bloodgroup):
        return [bg for bg in BLOOD_GROUPS if self.is_compatible(donor_bloodgroup, bg)]

    def __repr__(self):
        return f"<CompatibilityMatrix {self.name}>"


MATRICES = {
    'red_cell': CompatibilityMatrix('red_cell', RED_CELL_RECIPIENTS),
    'plasma': CompatibilityMatrix('plasma', PLASMA_RECIPIENTS),
    'platelets': CompatibilityMatrix('platelets', RED_CELL_RECIPIENTS, fallback=True),
}


def get_matrix(organ_type, config=None):
    """Matrix that governs ``organ_type``, or None if the type is not configured."""
    config = config or matching_settings()
    category = config['PRODUCT_CATEGORIES'].get(organ_type)
    rule = config['CATEGORY_RULES'].get(category)
    return MATRICES.get(rule)


def blood_tier(donor_bloodgroup, recipient_bloodgroup, organ_type, config=None):
    matrix = get_matrix(organ_type, config)
    if matrix is None:
        return None
    return matrix.tier(donor_bloodgroup, recipient_bloodgroup)


def get_compatible_blood_types(recipient_bloodgroup, organ_type='blood_whole', config=None):
    """
    Return the donor blood groups that can give ``organ_type`` to the recipient's blood group.
    """
    matrix = get_matrix(organ_type, config)
    return matrix.donors_for(recipient_bloodgroup) if matrix else []


def get_compatible_recipient_blood_types(donor_bloodgroup, organ_type='blood_whole', config=None):
    """
    Return the recipient blood groups a donor blood group can give ``organ_type`` to.
    """
    matrix = get_matrix(organ_type, config)
    return matrix.recipients_for(donor_bloodgroup) if matrix else []


def is_eligible(donor, recipient, config=None):
    """
    Decide whether ``donor`` may be matched to ``recipient``.

    Both arguments are DonorRecord / RecipientRecord values. Never raises for
    a disqualifying condition; it returns False instead.
    """
    if recipient.required_organ not in donor.organ_types:
        return False
    if not (donor.verified and recipient.verified):
        return False
    if donor.availability != ACTIVE:
        return False
    if recipient.status != VERIFIED:
        return False
    return blood_tier(donor.bloodgroup, recipient.bloodgroup, recipient.required_organ, config) is not None
