"""
Appointment lifecycle.

An appointment moves strictly forward through
``pending_payment -> paid -> scheduled -> in_progress -> completed``.
Each PATCH action names exactly one step; the current status is the
only precondition.  Transitions lock the appointment row and leave an
:class:`~clinic.models.AppointmentTransition` behind.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from rest_framework.exceptions import NotFound

from clinic.exceptions import BadRequest, InvalidTransition
from clinic.models import Appointment, AppointmentTransition
from clinic.services.audit import log_action, log_transaction

logger = logging.getLogger(__name__)

STATUSES = [s for s, _ in Appointment.STATUS_CHOICES]
ALLOCATED_STATUSES = [Appointment.STATUS_SCHEDULED, Appointment.STATUS_IN_PROGRESS, Appointment.STATUS_COMPLETED]

# action -> (required current status, next status, message when current status differs)
TRANSITIONS: dict[str, tuple[str, str, str]] = {
    'record_payment': (Appointment.STATUS_PENDING_PAYMENT, Appointment.STATUS_PAID,
                       'Appointment is not pending payment'),
    'allocate': (Appointment.STATUS_PAID, Appointment.STATUS_SCHEDULED,
                 'Appointment must be paid before allocating date'),
    'start': (Appointment.STATUS_SCHEDULED, Appointment.STATUS_IN_PROGRESS,
              'Only scheduled appointments can be started'),
    'finish': (Appointment.STATUS_IN_PROGRESS, Appointment.STATUS_COMPLETED,
               'Only in-progress appointments can be finished'),
}


def next_status(current: str, action: str) -> str:
    """Return the status ``action`` leads to from ``current``.

    Raises :class:`BadRequest` for an unknown action and
    :class:`InvalidTransition` when ``current`` is not the action's
    precondition.
    """
    try:
        required, target, message = TRANSITIONS[action]
    except KeyError:
        raise BadRequest('Unknown action') from None
    if current != required:
        raise InvalidTransition(message)
    return target


def default_fee() -> Decimal:
    return Decimal(str(getattr(settings, 'APPOINTMENT_DEFAULT_FEE', 50000)))


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _allocation(data: dict, apt: Appointment) -> tuple[str, date, str]:
    try:
        allocated_date = parse_date(data['allocatedDate']) if isinstance(data.get('allocatedDate'), str) else None
    except ValueError:
        # well formed but not a calendar day, e.g. 2025-02-30
        raise BadRequest('allocatedDate is not a valid date') from None
    allocated_time = _clean(data.get('allocatedTime'))
    if not allocated_date or not allocated_time:
        raise BadRequest('allocatedDate and allocatedTime are required')
    doctor = _clean(data.get('allocatedDoctor')) or apt.preferred_doctor
    return doctor, allocated_date, allocated_time


def apply_action(appointment_id, action: str, data: Optional[dict]=None, *, operator=None) -> Appointment:
    """Advance one appointment by ``action`` and return the saved row."""
    data = data or {}
    if action not in TRANSITIONS:
        raise BadRequest('Unknown action')
    with transaction.atomic():
        try:
            apt = Appointment.objects.select_for_update().get(id=appointment_id)
        except Appointment.DoesNotExist:
            raise NotFound('Appointment not found') from None
        old_status = apt.status
        new_status = next_status(old_status, action)
        if action == 'record_payment':
            apt.paid_at = timezone.now()
        elif action == 'allocate':
            apt.allocated_doctor, apt.allocated_date, apt.allocated_time = _allocation(data, apt)
        apt.status = new_status
        apt.save()
        AppointmentTransition.objects.create(
            appointment=apt,
            action=action,
            from_status=old_status,
            to_status=new_status,
            operator=operator if getattr(operator, 'pk', None) else None,
        )
        if action == 'record_payment':
            log_transaction(
                trans_id=apt.id,
                status='completed',
                step='appointment_fee',
                description=f'Appointment fee paid for {apt.patient_name}',
                data={'amount': str(apt.appointment_fee), 'appointmentId': str(apt.id)},
            )
        log_action(user=operator, action=f'appointment_{action}', object_type='appointment', object_id=apt.id,
                   detail={'from': old_status, 'to': new_status})
    logger.info('appointment %s: %s -> %s (%s)', apt.id, old_status, new_status, action)
    return apt


def filter_seed(rows: list[dict], *, status: Optional[str]=None, allocated_date: Optional[str]=None,
                allocated_doctor: Optional[str]=None, limit: int = 200) -> list[dict]:
    """Apply the list filters to fixture rows the way the query applies them."""
    out = []
    for row in rows:
        if status in STATUSES and row.get('status') != status:
            continue
        if allocated_date and (row.get('allocatedDate') != allocated_date or row.get('status') not in ALLOCATED_STATUSES):
            continue
        if allocated_doctor and row.get('allocatedDoctor') != allocated_doctor:
            continue
        out.append(row)
    if allocated_date:
        out.sort(key=lambda r: r.get('allocatedTime') or '')
    return out[:limit]
