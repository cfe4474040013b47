from decimal import Decimal

import pytest
from django.utils import timezone

from clinic.models import Invoice, Patient, TransactionLog
from clinic.services.billing import compute_total, line_amount
from clinic.exceptions import BadRequest

pytestmark = pytest.mark.django_db

ITEMS = [
    {'description': 'Consultation', 'category': 'consultation', 'quantity': 1, 'unitPrice': '50000'},
    {'description': 'Paracetamol', 'category': 'pharmacy', 'quantity': 2, 'unitPrice': '1500.50'},
]


@pytest.fixture
def patient():
    return Patient.objects.create(uhid='OPD-2025-0042', name='Grace Nambi')


@pytest.fixture
def accountant(client_for):
    return client_for('accountant')


def new_invoice(client, patient, **extra):
    body = {'patientId': str(patient.id), 'items': ITEMS, 'discount': '1000'}
    body.update(extra)
    return client.post('/api/invoices', body, format='json')


def pay(client, invoice_id, amount, **extra):
    return client.patch(f'/api/invoices/{invoice_id}', {'action': 'record_payment', 'amount': amount, **extra},
                        format='json')


def test_totals_are_computed_on_the_server(accountant, patient):
    r = new_invoice(accountant, patient, totalAmount='1')
    assert r.status_code == 201
    inv = r.data
    assert inv['invoiceNumber'] == f'INV-{timezone.localdate().year}-00001'
    assert Decimal(inv['totalAmount']) == Decimal('52001.00')
    assert Decimal(inv['balance']) == Decimal('52001.00')
    assert inv['status'] == 'pending'
    assert sorted(Decimal(i['amount']) for i in inv['items']) == [Decimal('3001.00'), Decimal('50000.00')]
    assert inv['createdBy'] == accountant.user.display_name


def test_invoice_numbers_increase(accountant, patient):
    new_invoice(accountant, patient)
    r = new_invoice(accountant, patient)
    assert r.data['invoiceNumber'].endswith('-00002')


def test_invoice_validation(accountant, patient):
    r = new_invoice(accountant, patient, items=[])
    assert r.data['error']['message'] == 'At least one invoice item is required'
    r = new_invoice(accountant, patient, discount='999999')
    assert r.data['error']['message'] == 'Discount exceeds invoice total'
    r = accountant.post('/api/invoices', {'patientId': '00000000-0000-0000-0000-000000000000', 'items': ITEMS},
                        format='json')
    assert r.data['error']['message'] == 'Patient not found'
    # drafts may be saved before any item is known
    r = new_invoice(accountant, patient, items=[], status='draft', discount='0')
    assert r.status_code == 201
    assert Decimal(r.data['totalAmount']) == 0


def test_payments_until_paid_then_refund(accountant, patient):
    inv = new_invoice(accountant, patient).data
    r = pay(accountant, inv['id'], '20000', paymentMethod='Cash')
    assert r.status_code == 200
    assert r.data['status'] == 'partially_paid'
    assert Decimal(r.data['balance']) == Decimal('32001.00')
    assert r.data['paymentMethod'] == 'Cash'

    r = pay(accountant, inv['id'], '40000')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Payment exceeds outstanding balance'

    r = pay(accountant, inv['id'], '32001')
    assert r.data['status'] == 'paid'
    assert Decimal(r.data['balance']) == 0

    r = accountant.patch(f"/api/invoices/{inv['id']}", {'action': 'cancel'}, format='json')
    assert r.data['error']['code'] == 'invalid_transition'

    r = accountant.patch(f"/api/invoices/{inv['id']}", {'action': 'refund'}, format='json')
    assert r.data['status'] == 'refunded'

    logs = TransactionLog.objects.filter(trans_id=inv['invoiceNumber']).order_by('created_at')
    assert [(t.step, t.status) for t in logs] == [('payment', 'completed'), ('payment', 'completed'),
                                                 ('refund', 'refunded')]
    rows = accountant.get('/api/transactions', {'transId': inv['invoiceNumber']}).data['transactions']
    assert len(rows) == 3


def test_payment_amount_must_be_positive_number(accountant, patient):
    inv = new_invoice(accountant, patient).data
    assert pay(accountant, inv['id'], 'lots').data['error']['message'] == 'amount must be a number'
    assert pay(accountant, inv['id'], '0').data['error']['message'] == 'amount must be greater than zero'
    r = accountant.patch(f"/api/invoices/{inv['id']}", {'action': 'record_payment'}, format='json')
    assert r.status_code == 400


def test_cancel_unpaid_only(accountant, patient):
    inv = new_invoice(accountant, patient).data
    r = accountant.patch(f"/api/invoices/{inv['id']}", {'action': 'cancel'}, format='json')
    assert r.data['status'] == 'cancelled'
    assert pay(accountant, inv['id'], '10').data['error']['code'] == 'invalid_transition'

    draft = new_invoice(accountant, patient, status='draft').data
    assert pay(accountant, draft['id'], '10').data['error']['message'] == 'Cannot record payment on a draft invoice'


def test_unknown_action_and_invoice(accountant, patient):
    inv = new_invoice(accountant, patient).data
    r = accountant.patch(f"/api/invoices/{inv['id']}", {'action': 'void'}, format='json')
    assert r.data['error']['message'] == 'Unknown action'
    r = accountant.get('/api/invoices/00000000-0000-0000-0000-000000000000')
    assert r.status_code == 404


def test_list_filters(accountant, patient, client_for):
    other = Patient.objects.create(uhid='OPD-2025-0043', name='Paul Ssali')
    first = new_invoice(accountant, patient).data
    new_invoice(accountant, other)
    accountant.patch(f"/api/invoices/{first['id']}", {'action': 'cancel'}, format='json')

    desk = client_for('receptionist')
    rows = desk.get('/api/invoices', {'patientId': str(patient.id)}).data['invoices']
    assert [r['id'] for r in rows] == [first['id']]
    rows = desk.get('/api/invoices', {'status': 'pending'}).data['invoices']
    assert [r['patientName'] for r in rows] == ['Paul Ssali']
    assert desk.post('/api/invoices', {}, format='json').status_code == 403


def test_line_and_total_helpers():
    assert line_amount(3, Decimal('0.335')) == Decimal('1.00')
    assert compute_total([{'quantity': 2, 'unit_price': Decimal('10')}], Decimal('5')) == Decimal('15')
    with pytest.raises(BadRequest):
        compute_total([], Decimal('1'))


def test_payment_method_is_validated(accountant, patient):
    inv = new_invoice(accountant, patient).data
    r = pay(accountant, inv['id'], '100', paymentMethod='<b>x</b>' * 40)
    assert r.status_code == 400
    assert 'paymentMethod' in r.data['error']['fields']
    assert Invoice.objects.get(id=inv['id']).paid_amount == 0

    r = pay(accountant, inv['id'], '100', paymentMethod='<i>Mobile money</i>')
    assert r.status_code == 200
    assert r.data['paymentMethod'] == 'Mobile money'


def test_draft_is_issued_before_payment(accountant, patient):
    empty = new_invoice(accountant, patient, items=[], status='draft', discount='0').data
    r = accountant.patch(f"/api/invoices/{empty['id']}", {'action': 'issue'}, format='json')
    assert r.data['error']['message'] == 'At least one invoice item is required'

    draft = new_invoice(accountant, patient, status='draft').data
    r = accountant.patch(f"/api/invoices/{draft['id']}", {'action': 'issue'}, format='json')
    assert r.status_code == 200
    assert r.data['status'] == 'pending'
    r = accountant.patch(f"/api/invoices/{draft['id']}", {'action': 'issue'}, format='json')
    assert r.data['error']['code'] == 'invalid_transition'

    r = pay(accountant, draft['id'], draft['totalAmount'])
    assert r.data['status'] == 'paid'
