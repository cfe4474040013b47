"""
Invoice numbering, totals and payment bookkeeping.

Money is kept as :class:`~decimal.Decimal` throughout.  Every payment
and refund leaves a :class:`~clinic.models.TransactionLog` row keyed by
the invoice number.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.exceptions import BadRequest, InvalidTransition
from clinic.models import Invoice, InvoiceItem
from clinic.services.audit import log_action, log_transaction

logger = logging.getLogger(__name__)

CLOSED_STATUSES = ('cancelled', 'refunded')
ACTIONS = ('issue', 'record_payment', 'cancel', 'refund')


def next_invoice_number(year: Optional[int] = None) -> str:
    year = year or timezone.localdate().year
    prefix = f'INV-{year}-'
    n = Invoice.objects.filter(invoice_number__startswith=prefix).count() + 1
    while Invoice.objects.filter(invoice_number=f'{prefix}{n:05d}').exists():
        n += 1
    return f'{prefix}{n:05d}'


def line_amount(quantity, unit_price) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(Decimal('0.01'))


def compute_total(items: Iterable[dict], discount=Decimal('0')) -> Decimal:
    subtotal = sum((line_amount(i['quantity'], i['unit_price']) for i in items), Decimal('0'))
    total = subtotal - Decimal(discount or 0)
    if total < 0:
        raise BadRequest('Discount exceeds invoice total')
    return total


@transaction.atomic
def create_invoice(*, patient, items: list[dict], created_by=None, discount=Decimal('0'), status: str = 'pending',
                   payment_method=None, insurance_claim_ref=None, notes=None) -> Invoice:
    if status != 'draft' and not items:
        raise BadRequest('At least one invoice item is required')
    invoice = Invoice.objects.create(
        invoice_number=next_invoice_number(),
        patient=patient,
        total_amount=compute_total(items, discount),
        discount=discount or Decimal('0'),
        status=status,
        payment_method=payment_method,
        insurance_claim_ref=insurance_claim_ref,
        notes=notes,
        created_by=created_by if getattr(created_by, 'pk', None) else None,
    )
    InvoiceItem.objects.bulk_create([
        InvoiceItem(
            invoice=invoice,
            description=i['description'],
            category=i.get('category'),
            quantity=i['quantity'],
            unit_price=i['unit_price'],
            amount=line_amount(i['quantity'], i['unit_price']),
        )
        for i in items
    ])
    log_action(user=created_by, action='invoice_create', object_type='invoice', object_id=invoice.id,
               detail={'number': invoice.invoice_number, 'total': str(invoice.total_amount)})
    return invoice


def _issue(invoice: Invoice, data: dict) -> None:
    if invoice.status != 'draft':
        raise InvalidTransition('Only draft invoices can be issued')
    if not invoice.items.exists():
        raise BadRequest('At least one invoice item is required')
    invoice.status = 'pending'


def _record_payment(invoice: Invoice, data: dict) -> None:
    if invoice.status in CLOSED_STATUSES or invoice.status in ('paid', 'draft'):
        raise InvalidTransition(f'Cannot record payment on a {invoice.status} invoice')
    try:
        amount = Decimal(str(data.get('amount')))
    except (ArithmeticError, ValueError):
        raise BadRequest('amount must be a number') from None
    if not amount.is_finite() or amount <= 0:
        raise BadRequest('amount must be greater than zero')
    if amount > invoice.balance:
        raise BadRequest('Payment exceeds outstanding balance')
    invoice.paid_amount += amount
    invoice.status = 'paid' if invoice.paid_amount >= invoice.total_amount else 'partially_paid'
    if data.get('paymentMethod'):
        invoice.payment_method = data['paymentMethod']
    log_transaction(
        trans_id=invoice.invoice_number,
        status='completed',
        step='payment',
        description=f'Payment on {invoice.invoice_number}',
        data={'amount': str(amount), 'paymentMethod': invoice.payment_method, 'balance': str(invoice.balance)},
    )


def _cancel(invoice: Invoice, data: dict) -> None:
    if invoice.status in CLOSED_STATUSES or invoice.paid_amount > 0:
        raise InvalidTransition('Only unpaid invoices can be cancelled')
    invoice.status = 'cancelled'


def _refund(invoice: Invoice, data: dict) -> None:
    if invoice.status != 'paid':
        raise InvalidTransition('Only paid invoices can be refunded')
    log_transaction(
        trans_id=invoice.invoice_number,
        status='refunded',
        step='refund',
        description=f'Refund on {invoice.invoice_number}',
        data={'amount': str(invoice.paid_amount)},
    )
    invoice.status = 'refunded'


_HANDLERS = {
    'issue': _issue,
    'record_payment': _record_payment,
    'cancel': _cancel,
    'refund': _refund,
}


def apply_invoice_action(invoice_id, action: str, data: Optional[dict] = None, *, operator=None) -> Invoice:
    handler = _HANDLERS.get(action)
    if handler is None:
        raise BadRequest('Unknown action')
    with transaction.atomic():
        try:
            invoice = Invoice.objects.select_for_update().get(id=invoice_id)
        except Invoice.DoesNotExist:
            raise NotFound('Invoice not found') from None
        old_status = invoice.status
        handler(invoice, data or {})
        invoice.save()
        log_action(user=operator, action=f'invoice_{action}', object_type='invoice', object_id=invoice.id,
                   detail={'from': old_status, 'to': invoice.status})
    logger.info('invoice %s: %s -> %s (%s)', invoice.invoice_number, old_status, invoice.status, action)
    return invoice
