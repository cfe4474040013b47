"""
Patient registry views.

Staff with access to the ``patients`` module can search, register and
update patients.  Reads fall back to the bundled fixtures when the
database is unavailable; writes never do.  The detail endpoint follows
the patient data access policy: demographics, prescriptions and the
billing summary are each shown only to roles allowed to view them.
"""
from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Q, Sum
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest
from ..models import Patient, Prescription
from ..permissions import module_permission
from ..serializers.patient import PatientListQuerySerializer, PatientSerializer
from ..services.access import can_access_patient_data
from ..services.audit import log_action
from ..services.patients import create_patient, deactivate_patient, patient_payload, search_seed, update_patient
from ..services.seed import seed_patients

logger = logging.getLogger(__name__)

PatientsPermission = module_permission('patients')

# what a role outside the demographics policy still sees of a patient
RECORD_KEYS = ('id', 'uhid', 'isActive', 'createdAt')


def patient_json(p: Patient) -> dict:
    return {
        'id': str(p.id),
        'uhid': p.uhid,
        'name': p.name,
        'age': p.age,
        'dateOfBirth': p.date_of_birth.isoformat() if p.date_of_birth else None,
        'gender': p.gender,
        'phone': p.phone,
        'email': p.email,
        'address': p.address,
        'countryCode': p.country_code,
        'district': p.district,
        'nextOfKin': p.next_of_kin,
        'nextOfKinPhone': p.next_of_kin_phone,
        'nextOfKinRelationship': p.next_of_kin_relationship,
        'insuranceType': p.insurance_type,
        'insurancePolicy': p.insurance_policy,
        'isActive': p.is_active,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
    }


def _get_patient(patient_id) -> Patient:
    try:
        pk = uuid.UUID(str(patient_id))
    except ValueError:
        raise NotFound('Patient not found') from None
    p = Patient.objects.filter(id=pk).first()
    if not p:
        raise NotFound('Patient not found')
    return p


@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated, PatientsPermission])
def patients(request):
    """Search (``GET ?q=``), register (``POST``) or merge-update (``PUT``).

    ``POST`` and ``PUT`` accept ``{"patient": {...}}`` as well as a flat
    body; ``PUT`` needs the patient ``id`` and only touches the fields
    it is given.
    """
    if request.method == 'POST':
        s = PatientSerializer(data=patient_payload(request.data))
        s.is_valid(raise_exception=True)
        p = create_patient(**s.validated_data)
        log_action(user=request.user, action='patient_create', object_type='patient', object_id=p.id,
                   request=request, detail={'uhid': p.uhid})
        return Response({'patient': patient_json(p)}, status=status.HTTP_201_CREATED)

    if request.method == 'PUT':
        data = patient_payload(request.data)
        if not data.get('id'):
            raise BadRequest('Patient with id is required')
        p = _get_patient(data['id'])
        s = PatientSerializer(data=data, partial=True)
        s.is_valid(raise_exception=True)
        update_patient(p, **s.validated_data)
        log_action(user=request.user, action='patient_update', object_type='patient', object_id=p.id,
                   request=request)
        return Response({'patient': patient_json(p)})

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    term = (q.validated_data.get('q') or '').strip()
    limit = settings.LIST_LIMITS['patients']
    try:
        qs = Patient.objects.all()
        if not q.validated_data.get('includeInactive'):
            qs = qs.filter(is_active=True)
        if term:
            qs = qs.filter(Q(name__icontains=term) | Q(uhid__icontains=term) | Q(phone__icontains=term))
        rows = [patient_json(p) for p in qs.order_by('-created_at')[:limit]]
    except DatabaseError as exc:
        logger.warning('patients list: database unavailable, serving seed data (%s)', exc)
        rows = search_seed(seed_patients(), term)[:limit]
    return Response({'patients': rows})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, PatientsPermission])
def patient_detail(request, patient_id):
    p = _get_patient(patient_id)
    if request.method == 'DELETE':
        deactivate_patient(p)
        log_action(user=request.user, action='patient_deactivate', object_type='patient', object_id=p.id,
                   request=request)
        return Response({'success': True})

    if request.method == 'PUT':
        s = PatientSerializer(data=patient_payload(request.data), partial=True)
        s.is_valid(raise_exception=True)
        update_patient(p, **s.validated_data)
        log_action(user=request.user, action='patient_update', object_type='patient', object_id=p.id,
                   request=request)
        return Response({'patient': patient_json(p)})

    role = getattr(request.user, 'role', None)
    data = patient_json(p)
    if not can_access_patient_data(role, 'demographics', 'view'):
        data = {key: data[key] for key in RECORD_KEYS}
    if can_access_patient_data(role, 'prescriptions', 'view'):
        rx = Prescription.objects.filter(Q(patient_id=p.uhid) | Q(patient_id=str(p.id))).order_by('-created_at')[:50]
        data['prescriptions'] = [
            {'id': str(r.id), 'medication': r.medication, 'dosage': r.dosage, 'status': r.status}
            for r in rx
        ]
    if can_access_patient_data(role, 'billing', 'view'):
        totals = p.invoices.exclude(status='cancelled').aggregate(total=Sum('total_amount'), paid=Sum('paid_amount'))
        data['billing'] = {
            'invoiceCount': p.invoices.count(),
            'totalInvoiced': str(totals['total'] or 0),
            'totalPaid': str(totals['paid'] or 0),
        }
    return Response({'patient': data})
