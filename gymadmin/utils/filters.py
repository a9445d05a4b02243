"""
Member list filtering.

`MemberFilter` is the single definition of which members a search/status/
membership-type selection includes. It renders both as an in-memory
predicate and as a SQL WHERE clause; the two agree for the same `now`.
"""
from gymadmin.utils.errors import BadRequestError
from gymadmin.utils.helpers import to_db_timestamp
from gymadmin.utils.membership import (
    EXPIRING_WINDOW, MemberStatus, MembershipType, derive_status,
)

ALL = 'all'

# Dashboard selector values alongside the enum names
STATUS_ALIASES = {
    'active': MemberStatus.ACTIVE,
    'inactive': MemberStatus.INACTIVE,
    'expiring': MemberStatus.EXPIRING_SOON,
    'expiring_soon': MemberStatus.EXPIRING_SOON,
    'archived': MemberStatus.ARCHIVED,
}


def parse_status_selector(value):
    """'all'/None -> None, otherwise a MemberStatus."""
    if value is None or str(value).strip() == '' or str(value).strip().lower() == ALL:
        return None
    key = str(value).strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    raise BadRequestError('Invalid status')


def parse_membership_selector(value):
    if value is None or str(value).strip() == '' or str(value).strip().lower() == ALL:
        return None
    try:
        return MembershipType(str(value).strip().upper())
    except ValueError:
        raise BadRequestError('Invalid membership type')


class MemberFilter:
    def __init__(self, search=None, status=None, membership_type=None):
        self.search = (search or '').strip()
        self.status = parse_status_selector(status)
        self.membership_type = parse_membership_selector(membership_type)

    @classmethod
    def from_args(cls, args):
        return cls(
            search=args.get('search'),
            status=args.get('status'),
            membership_type=args.get('membershipType'),
        )

    # -------------------- in-memory --------------------

    def matches_search(self, member):
        if not self.search:
            return True
        needle = self.search.casefold()
        return any(
            needle in (value or '').casefold()
            for value in (member.name, member.email, member.phone)
        )

    def matches_status(self, member, now):
        effective = derive_status(member.expiry_date, now, member.status)
        if self.status is None:
            return effective is not MemberStatus.ARCHIVED
        return effective is self.status

    def matches_membership_type(self, member):
        if self.membership_type is None:
            return True
        return MembershipType(member.membership_type) is self.membership_type

    def matches(self, member, now):
        return (self.matches_search(member)
                and self.matches_status(member, now)
                and self.matches_membership_type(member))

    def apply(self, members, now):
        return [m for m in members if self.matches(m, now)]

    # -------------------- SQL --------------------

    def to_sql(self, now, alias='m'):
        """Return (where_clause, params) selecting the same members as matches()."""
        col = f'{alias}.' if alias else ''
        clauses, params = [], []

        if self.search:
            clauses.append(
                f"(instr(CASEFOLD({col}name), ?) > 0"
                f" OR instr(CASEFOLD({col}email), ?) > 0"
                f" OR instr(CASEFOLD({col}phone), ?) > 0)"
            )
            needle = self.search.casefold()
            params.extend([needle, needle, needle])

        now_s = to_db_timestamp(now)
        soon_s = to_db_timestamp(now + EXPIRING_WINDOW)
        if self.status is MemberStatus.ARCHIVED:
            clauses.append(f"{col}status = 'ARCHIVED'")
        else:
            clauses.append(f"{col}status != 'ARCHIVED'")
            if self.status is MemberStatus.INACTIVE:
                clauses.append(f"{col}expiry_date <= ?")
                params.append(now_s)
            elif self.status is MemberStatus.EXPIRING_SOON:
                clauses.append(f"{col}expiry_date > ? AND {col}expiry_date <= ?")
                params.extend([now_s, soon_s])
            elif self.status is MemberStatus.ACTIVE:
                clauses.append(f"{col}expiry_date > ?")
                params.append(soon_s)

        if self.membership_type is not None:
            clauses.append(f"{col}membership_type = ?")
            params.append(self.membership_type.value)

        return ' AND '.join(clauses), params
