"""
Collection and dues reports. Aggregation only; formatting is left to the client.
"""
from datetime import datetime, time

from django.db.models import Count, Sum
from django.utils import timezone

from classes.services import get_class
from core.utils import money
from fees.models import StudentFee
from payments.models import FeeTransaction


def local_day_bounds(day):
    """[start, end] of a calendar day in the configured TIME_ZONE, as aware datetimes."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    end = timezone.make_aware(datetime.combine(day, time.max), tz)
    return start, end


def daily_collection(day=None):
    """Successful transactions paid on one local day, totalled per method."""
    day = day or timezone.localdate()
    start, end = local_day_bounds(day)
    transactions = (
        FeeTransaction.objects.filter(
            status=FeeTransaction.STATUS_SUCCESS,
            paid_at__gte=start,
            paid_at__lte=end,
        )
        .select_related('student_profile__user', 'student_fee__fee_structure', 'collected_by')
    )

    by_method = {}
    rows = (
        transactions.values('method')
        .annotate(total=Sum('amount'), count=Count('id'))
        .order_by('method')
    )
    for row in rows:
        by_method[row['method']] = {'total': money(row['total']), 'count': row['count']}

    totals = transactions.aggregate(total=Sum('amount'), count=Count('id'))
    return {
        'date': day,
        'total': money(totals['total']),
        'count': totals['count'] or 0,
        'by_method': by_method,
        'transactions': list(transactions.order_by('paid_at', 'id')),
    }


def pending_dues(class_id=None):
    """Rows still owing money (unpaid, partial, overdue), optionally for one class."""
    records = StudentFee.objects.filter(status__in=StudentFee.PENDING_STATUSES)
    if class_id is not None:
        records = records.filter(school_class=get_class(class_id))
    records = records.select_related('student_profile__user', 'school_class', 'fee_structure')

    by_class = [
        {
            'class_id': row['school_class_id'],
            'class_name': row['school_class__name'],
            'year': row['school_class__year'],
            'count': row['count'],
            'total_due': money(row['total_due']),
        }
        for row in (
            records.values('school_class_id', 'school_class__name', 'school_class__year')
            .annotate(count=Count('id'), total_due=Sum('due_amount'))
            .order_by('school_class__name', 'school_class_id')
        )
    ]
    totals = records.aggregate(total_due=Sum('due_amount'), count=Count('id'))
    return {
        'total_due': money(totals['total_due']),
        'count': totals['count'] or 0,
        'by_class': by_class,
        'records': list(records.order_by('school_class__name', 'due_date', 'id')),
    }
