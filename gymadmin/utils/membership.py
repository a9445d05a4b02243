"""
Membership lifecycle rules.

A member's status is derived from the expiry date except for ARCHIVED,
which is a manual, sticky state left only through an explicit restore.
"""
from datetime import timedelta
from enum import Enum

from gymadmin.utils.errors import BadRequestError

EXPIRING_WINDOW = timedelta(days=30)


class MemberStatus(str, Enum):
    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'
    EXPIRING_SOON = 'EXPIRING_SOON'
    ARCHIVED = 'ARCHIVED'


class MembershipType(str, Enum):
    ONE_MONTH = 'ONE_MONTH'
    THREE_MONTH = 'THREE_MONTH'
    SIX_MONTH = 'SIX_MONTH'
    ONE_YEAR = 'ONE_YEAR'

    @property
    def months(self):
        return {'ONE_MONTH': 1, 'THREE_MONTH': 3, 'SIX_MONTH': 6, 'ONE_YEAR': 12}[self.value]


class Gender(str, Enum):
    MALE = 'MALE'
    FEMALE = 'FEMALE'
    OTHER = 'OTHER'


class StatusTransitionError(BadRequestError):
    pass


def derive_status(expiry_date, now, current_status=None):
    """
    Status for a member expiring at `expiry_date`, evaluated at `now`.

    ARCHIVED is returned unchanged; otherwise INACTIVE once the expiry has
    passed, EXPIRING_SOON within the next 30 days, ACTIVE beyond that.
    """
    if current_status is not None and MemberStatus(current_status) is MemberStatus.ARCHIVED:
        return MemberStatus.ARCHIVED
    if expiry_date <= now:
        return MemberStatus.INACTIVE
    if expiry_date <= now + EXPIRING_WINDOW:
        return MemberStatus.EXPIRING_SOON
    return MemberStatus.ACTIVE


def archive(current_status):
    """ACTIVE/INACTIVE/EXPIRING_SOON -> ARCHIVED. Archiving twice is a no-op."""
    MemberStatus(current_status)
    return MemberStatus.ARCHIVED


def restore(current_status, expiry_date, now):
    """ARCHIVED -> derived status. Any other starting state is rejected."""
    if MemberStatus(current_status) is not MemberStatus.ARCHIVED:
        raise StatusTransitionError('Member is not archived')
    return derive_status(expiry_date, now)
