"""
Invoice endpoints.

Totals are always computed on the server from the invoice items; the
client only names the items, the discount and later the payments.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest
from ..models import Invoice, Patient, TransactionLog
from ..permissions import module_permission
from ..serializers.billing import InvoiceActionSerializer, InvoiceCreateSerializer, InvoiceListQuerySerializer
from ..services.billing import ACTIONS, apply_invoice_action, create_invoice

BillingPermission = module_permission('billing')


def invoice_json(inv: Invoice, with_items: bool = False) -> dict:
    data = {
        'id': str(inv.id),
        'invoiceNumber': inv.invoice_number,
        'patientId': str(inv.patient_id),
        'patientName': inv.patient.name,
        'totalAmount': str(inv.total_amount),
        'paidAmount': str(inv.paid_amount),
        'discount': str(inv.discount),
        'balance': str(inv.balance),
        'status': inv.status,
        'paymentMethod': inv.payment_method,
        'insuranceClaimRef': inv.insurance_claim_ref,
        'notes': inv.notes,
        'createdBy': inv.created_by.display_name if inv.created_by_id else None,
        'createdAt': inv.created_at.isoformat() if inv.created_at else None,
    }
    if with_items:
        data['items'] = [
            {
                'id': str(i.id),
                'description': i.description,
                'category': i.category,
                'quantity': i.quantity,
                'unitPrice': str(i.unit_price),
                'amount': str(i.amount),
            }
            for i in inv.items.order_by('created_at', 'id')
        ]
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, BillingPermission])
def invoices(request):
    if request.method == 'POST':
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        patient = Patient.objects.filter(id=vd.pop('patient_id')).first()
        if not patient:
            raise BadRequest('Patient not found')
        inv = create_invoice(patient=patient, created_by=request.user, **vd)
        return Response(invoice_json(inv, with_items=True), status=status.HTTP_201_CREATED)

    q = InvoiceListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = Invoice.objects.select_related('patient', 'created_by')
    if q.validated_data.get('status'):
        qs = qs.filter(status=q.validated_data['status'])
    if q.validated_data.get('patientId'):
        qs = qs.filter(patient_id=q.validated_data['patientId'])
    rows = [invoice_json(i) for i in qs.order_by('-created_at')[:settings.LIST_LIMITS['invoices']]]
    return Response({'invoices': rows})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, BillingPermission])
def invoice_detail(request, invoice_id):
    """Fetch one invoice with its items, or apply an action to it.

    Actions: ``issue`` (draft to pending), ``record_payment``
    (``amount``, optional ``paymentMethod``), ``cancel`` and ``refund``.
    """
    if request.method == 'PATCH':
        s = InvoiceActionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        action = s.validated_data['action']
        if action not in ACTIONS:
            raise BadRequest('Unknown action')
        apply_invoice_action(invoice_id, action, s.validated_data, operator=request.user)
    inv = Invoice.objects.select_related('patient', 'created_by').filter(id=invoice_id).first()
    if not inv:
        raise NotFound('Invoice not found')
    return Response(invoice_json(inv, with_items=True))


@api_view(['GET'])
@permission_classes([IsAuthenticated, BillingPermission])
def transactions(request):
    """Most recent money movements (appointment fees, payments, refunds)."""
    qs = TransactionLog.objects.order_by('-created_at')
    trans_id = request.query_params.get('transId')
    if trans_id:
        qs = qs.filter(trans_id=trans_id)
    rows = [
        {
            'id': str(t.id),
            'transId': t.trans_id,
            'status': t.status,
            'step': t.step,
            'description': t.description,
            'data': t.data,
            'createdAt': t.created_at.isoformat(),
        }
        for t in qs[:settings.LIST_LIMITS['transactions']]
    ]
    return Response({'transactions': rows})
