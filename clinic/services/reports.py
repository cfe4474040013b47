import logging
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth

from clinic.models import Appointment, Invoice, PatientClerking, TransactionLog

logger = logging.getLogger(__name__)

CACHE_PREFIX = 'report:'


def _counts(qs, field):
    return {row[field]: row['n'] for row in qs.values(field).annotate(n=Count('id')).order_by(field)}


def _money(value):
    return str(value if value is not None else Decimal('0.00'))


def transactions_report():
    qs = TransactionLog.objects.all()
    by_month = (
        qs.annotate(month=TruncMonth('created_at'))
        .values('month').annotate(n=Count('id')).order_by('month')
    )
    return {
        'totalCount': qs.count(),
        'byStatus': _counts(qs, 'status'),
        'byStep': _counts(qs.exclude(step__isnull=True), 'step'),
        'byMonth': [{'month': r['month'].strftime('%Y-%m'), 'count': r['n']} for r in by_month if r['month']],
    }


def appointments_summary():
    qs = Appointment.objects.all()
    revenue = qs.filter(paid_at__isnull=False).aggregate(total=Sum('appointment_fee'))['total']
    return {
        'totalCount': qs.count(),
        'byStatus': _counts(qs, 'status'),
        'feesCollected': _money(revenue),
    }


def clerking_summary():
    qs = PatientClerking.objects.all()
    return {
        'totalCount': qs.count(),
        'bySource': _counts(qs, 'arrival_source'),
        'byStatus': _counts(qs, 'status'),
    }


def billing_summary():
    qs = Invoice.objects.exclude(status='cancelled')
    totals = qs.aggregate(invoiced=Sum('total_amount'), paid=Sum('paid_amount'))
    invoiced = totals['invoiced'] or Decimal('0.00')
    paid = totals['paid'] or Decimal('0.00')
    return {
        'invoiceCount': qs.count(),
        'totalInvoiced': _money(invoiced),
        'totalPaid': _money(paid),
        'outstanding': _money(invoiced - paid),
        'byStatus': _counts(Invoice.objects.all(), 'status'),
    }


BUILDERS = {
    'transactions': transactions_report,
    'appointments_summary': appointments_summary,
    'clerking_summary': clerking_summary,
    'billing_summary': billing_summary,
}


def build_report(report_type):
    """Return the report body, served from cache when fresh."""
    key = CACHE_PREFIX + report_type
    data = cache.get(key)
    if data is None:
        data = BUILDERS[report_type]()
        cache.set(key, data, getattr(settings, 'REPORT_CACHE_SECONDS', 60))
        logger.debug('report %s rebuilt', report_type)
    return data
