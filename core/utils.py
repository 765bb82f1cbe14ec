"""
Core utilities: money rounding, remarks, organization scoping.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def money(value):
    """
    Quantize to 2 decimal places (ROUND_HALF_UP).
    None -> 0.00. Floats go through str() so 0.1 stays 0.10.
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValueError(f'Not a monetary amount: {value!r}')
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def append_remark(existing, note):
    """Remarks are an append-only audit trail joined with ' | '."""
    note = (note or '').strip()
    if not note:
        return existing or ''
    if existing:
        return f'{existing} | {note}'
    return note


def _user_org(user):
    return getattr(user, 'organization', None) or getattr(user, 'organization_id', None)


def belongs_to_user_organization(obj, user, org_attr='organization'):
    """
    Check if object belongs to user's organization.
    Returns True if user has no org (single-tenant) or obj's org matches user's org.
    """
    from django.conf import settings
    if getattr(settings, 'SINGLE_TENANT', True):
        return True
    user_org = _user_org(user)
    if user_org is None:
        return True
    obj_org = getattr(obj, org_attr, None)
    if obj_org is None:
        return True
    return obj_org == user_org or (hasattr(obj_org, 'pk') and obj_org.pk == getattr(user_org, 'pk', user_org))

