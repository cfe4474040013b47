"""
Prescription endpoints.

Doctors write prescriptions; the pharmacy lists them by patient and
dispenses them, optionally drawing the quantity from a stock item.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest, InvalidTransition
from ..models import Appointment, PharmacyStock, Prescription
from ..permissions import module_permission
from ..serializers.common import split_csv
from ..serializers.prescription import DispenseSerializer, PrescriptionCreateSerializer
from ..services.audit import account, log_action

logger = logging.getLogger(__name__)

PharmacyPermission = module_permission('pharmacy')


def prescription_json(p: Prescription) -> dict:
    return {
        'id': str(p.id),
        'patientName': p.patient_name,
        'patientId': p.patient_id,
        'appointmentId': str(p.appointment_id) if p.appointment_id else None,
        'medication': p.medication,
        'dosage': p.dosage,
        'instructions': p.instructions,
        'prescribedBy': p.prescribed_by,
        'status': p.status,
        'dispensedAt': p.dispensed_at.isoformat() if p.dispensed_at else None,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PharmacyPermission])
def prescriptions(request):
    """List prescriptions or write a new one.

    ``GET`` takes comma separated ``patient_names`` and ``patient_ids``;
    a prescription matching either list is returned.  If the database
    cannot be reached the list is simply empty.
    """
    if request.method == 'POST':
        s = PrescriptionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        if vd.get('appointment_id') and not Appointment.objects.filter(id=vd['appointment_id']).exists():
            raise BadRequest('Appointment not found')
        if not vd.get('prescribed_by'):
            vd['prescribed_by'] = getattr(request.user, 'display_name', None) or 'doctor'
        rx = Prescription.objects.create(status=Prescription.STATUS_PENDING, **vd)
        log_action(user=request.user, action='prescription_create', object_type='prescription', object_id=rx.id,
                   request=request)
        return Response(prescription_json(rx), status=status.HTTP_201_CREATED)

    names = split_csv(request.query_params.get('patient_names'))
    ids = split_csv(request.query_params.get('patient_ids'))
    cond = Q()
    if names:
        cond |= Q(patient_name__in=names)
    if ids:
        cond |= Q(patient_id__in=ids)
    try:
        qs = Prescription.objects.filter(cond).order_by('-created_at')[:settings.LIST_LIMITS['prescriptions']]
        rows = [prescription_json(p) for p in qs]
    except DatabaseError as exc:
        logger.warning('prescriptions list: database unavailable (%s)', exc)
        rows = []
    return Response({'prescriptions': rows})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, PharmacyPermission])
def prescription_detail(request, prescription_id):
    if request.method == 'GET':
        rx = Prescription.objects.filter(id=prescription_id).first()
        if not rx:
            raise NotFound('Prescription not found')
        return Response(prescription_json(rx))

    s = DispenseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    stock_id = s.validated_data.get('stockId')
    quantity = s.validated_data['quantity']
    with transaction.atomic():
        rx = Prescription.objects.select_for_update().filter(id=prescription_id).first()
        if not rx:
            raise NotFound('Prescription not found')
        if rx.status != Prescription.STATUS_PENDING:
            raise InvalidTransition('Only pending prescriptions can be dispensed')
        if stock_id:
            stock = PharmacyStock.objects.select_for_update().filter(id=stock_id, is_active=True).first()
            if not stock:
                raise BadRequest('Stock item not found')
            if stock.quantity_in_stock < quantity:
                raise BadRequest(f'Insufficient stock: {stock.quantity_in_stock} {stock.unit or "units"} left')
            stock.quantity_in_stock -= quantity
            stock.save(update_fields=['quantity_in_stock', 'updated_at'])
        rx.status = Prescription.STATUS_DISPENSED
        rx.dispensed_at = timezone.now()
        rx.dispensed_by = account(request.user)
        rx.save()
        log_action(user=request.user, action='prescription_dispense', object_type='prescription', object_id=rx.id,
                   request=request, detail={'stockId': str(stock_id) if stock_id else None, 'quantity': quantity})
    return Response(prescription_json(rx))
