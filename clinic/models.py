"""
Database models for the HMIS backend.

These models capture the administrative records of the hospital:
staff accounts and the facility/department directory, the patient
registry, clerking, appointments, prescriptions, pharmacy stock and
billing, plus the audit and transaction logs.  Domain records use UUID
primary keys so that identifiers handed out by the seed fixtures and by
the database look alike to the front end.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models

from .roles import ROLE_CHOICES


class Facility(models.Model):
    """A hospital, clinic or other site operated by the organisation."""
    TYPE_CHOICES = [
        ('hospital', 'Hospital'),
        ('clinic', 'Clinic'),
        ('health_center', 'Health center'),
        ('pharmacy', 'Pharmacy'),
        ('lab', 'Lab'),
        ('other', 'Other'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Short code e.g. HOS-001, CLN-002
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    facility_type = models.CharField(max_length=50, choices=TYPE_CHOICES, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    email = models.CharField(max_length=255, null=True, blank=True)
    district = models.CharField(max_length=100, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    facility_admin = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='administered_facilities'
    )
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Department(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    # Short code e.g. OPD, LAB, PHAR
    code = models.CharField(max_length=20, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    head_of_department = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='headed_departments'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Employee(models.Model):
    """A staff member's HR record.

    Employees exist independently of login accounts; a :class:`User`
    may point at its employee record, and a :class:`Doctor` marks the
    employees that appear in the doctors directory.
    """
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('on_leave', 'On leave'),
        ('terminated', 'Terminated'),
        ('suspended', 'Suspended'),
    ]
    EMPLOYMENT_CHOICES = [
        ('full_time', 'Full time'),
        ('part_time', 'Part time'),
        ('contract', 'Contract'),
        ('intern', 'Intern'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Auto-generated staff ID e.g. EMP-00001
    employee_code = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    gender = models.CharField(max_length=20, null=True, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    email = models.CharField(max_length=255, null=True, blank=True)
    national_id = models.CharField(max_length=100, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    facility = models.CharField(max_length=255, null=True, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='employees'
    )
    job_title = models.CharField(max_length=100, null=True, blank=True)
    specialisation = models.CharField(max_length=100, null=True, blank=True)
    employment_type = models.CharField(max_length=50, choices=EMPLOYMENT_CHOICES, null=True, blank=True)
    date_joined = models.DateField(null=True, blank=True)
    license_number = models.CharField(max_length=100, null=True, blank=True)
    emergency_contact_name = models.CharField(max_length=255, null=True, blank=True)
    emergency_contact_phone = models.CharField(max_length=50, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.employee_code})"


class Doctor(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff = models.OneToOneField(Employee, on_delete=models.CASCADE, related_name='doctor_record')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Dr. {self.staff.full_name}"


class User(AbstractUser):
    """Staff login account.

    Users sign in with their e-mail address.  The ``role`` field is the
    key into the module permission matrix.  Accounts are never removed
    from the table; ``deleted_at`` marks a soft delete.
    """
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('suspended', 'Suspended'),
        ('pending', 'Pending'),
    ]
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='receptionist', db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    activated_at = models.DateTimeField(null=True, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    facility = models.ForeignKey(
        Facility, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    employee = models.OneToOneField(
        Employee, null=True, blank=True, on_delete=models.SET_NULL, related_name='user_account'
    )

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.email or self.username

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class FacilityTeam(models.Model):
    """Assignment of a staff account to a facility."""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('on_leave', 'On leave'),
        ('suspended', 'Suspended'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff = models.ForeignKey(User, on_delete=models.CASCADE, related_name='facility_assignments')
    facility = models.ForeignKey(Facility, on_delete=models.CASCADE, related_name='team')
    status = models.CharField(max_length=50, choices=STATUS_CHOICES, default='active')
    details = models.TextField(null=True, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.staff_id} @ {self.facility_id} ({self.status})"


class Patient(models.Model):
    """Registered patient.  ``uhid`` is the hospital-wide patient number."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    uhid = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    email = models.CharField(max_length=255, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    country_code = models.CharField(max_length=10, null=True, blank=True)
    district = models.CharField(max_length=100, null=True, blank=True)
    next_of_kin = models.CharField(max_length=255, null=True, blank=True)
    next_of_kin_phone = models.CharField(max_length=50, null=True, blank=True)
    next_of_kin_relationship = models.CharField(max_length=50, null=True, blank=True)
    insurance_type = models.CharField(max_length=50, default='self-pay')
    insurance_policy = models.CharField(max_length=255, null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.uhid})"


class PatientClerking(models.Model):
    """Front-desk arrival record written when a patient reaches the hospital."""
    ARRIVAL_SOURCES = ['OPD', 'Emergency Department', 'Elective Admission']
    STATUSES = ['Pending assessment', 'Assessed', 'Admitted']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_name = models.CharField(max_length=255)
    patient_id = models.CharField(max_length=100, null=True, blank=True)
    arrival_source = models.CharField(max_length=50, choices=[(s, s) for s in ARRIVAL_SOURCES])
    date_of_arrival = models.DateField()
    time_of_arrival = models.CharField(max_length=10)
    status = models.CharField(max_length=50, choices=[(s, s) for s in STATUSES], db_index=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    gender = models.CharField(max_length=20, null=True, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    recorded_by = models.CharField(max_length=50)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self) -> str:
        return f"{self.patient_name} via {self.arrival_source} ({self.status})"


class Appointment(models.Model):
    """An outpatient appointment and its payment/scheduling lifecycle.

    The status only ever moves forward along
    ``pending_payment -> paid -> scheduled -> in_progress -> completed``;
    see :mod:`clinic.services.appointments` for the transition table.
    """
    STATUS_PENDING_PAYMENT = 'pending_payment'
    STATUS_PAID = 'paid'
    STATUS_SCHEDULED = 'scheduled'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING_PAYMENT, 'Pending payment'),
        (STATUS_PAID, 'Paid'),
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_name = models.CharField(max_length=255)
    patient_id = models.CharField(max_length=100, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    reason = models.CharField(max_length=500, null=True, blank=True)
    preferred_doctor = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(max_length=50, choices=STATUS_CHOICES, default=STATUS_PENDING_PAYMENT, db_index=True)
    appointment_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    paid_at = models.DateTimeField(null=True, blank=True)
    allocated_doctor = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    allocated_date = models.DateField(null=True, blank=True)
    allocated_time = models.CharField(max_length=10, null=True, blank=True)
    booked_by = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['allocated_date', 'allocated_time']),
        ]

    def __str__(self) -> str:
        return f"{self.patient_name} ({self.status})"


class AppointmentTransition(models.Model):
    """Records a status transition for an appointment."""
    appointment = models.ForeignKey(Appointment, related_name='transitions', on_delete=models.CASCADE)
    action = models.CharField(max_length=30)
    from_status = models.CharField(max_length=50)
    to_status = models.CharField(max_length=50)
    operator = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointment_transitions')
    timestamp = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.appointment_id}: {self.from_status} → {self.to_status}"


class Prescription(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_DISPENSED = 'dispensed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_DISPENSED, 'Dispensed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_name = models.CharField(max_length=255, db_index=True)
    patient_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions'
    )
    medication = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255, null=True, blank=True)
    instructions = models.TextField(null=True, blank=True)
    prescribed_by = models.CharField(max_length=255)
    status = models.CharField(max_length=50, choices=STATUS_CHOICES, default=STATUS_PENDING)
    dispensed_at = models.DateTimeField(null=True, blank=True)
    dispensed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='dispensed_prescriptions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.medication} for {self.patient_name}"


class PharmacyStock(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    drug_name = models.CharField(max_length=255)
    generic_name = models.CharField(max_length=100, null=True, blank=True)
    # Tablet, Capsule, Syrup, Injection, etc.
    form = models.CharField(max_length=50, null=True, blank=True)
    # e.g. 500mg, 250mg/5ml
    strength = models.CharField(max_length=100, null=True, blank=True)
    quantity_in_stock = models.IntegerField(default=0)
    reorder_level = models.IntegerField(default=10)
    unit = models.CharField(max_length=50, null=True, blank=True)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    batch_number = models.CharField(max_length=100, null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    supplier = models.CharField(max_length=255, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_low(self) -> bool:
        return self.quantity_in_stock <= self.reorder_level

    def __str__(self) -> str:
        return f"{self.drug_name} ({self.quantity_in_stock})"


class Invoice(models.Model):
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('pending', 'Pending'),
        ('partially_paid', 'Partially paid'),
        ('paid', 'Paid'),
        ('cancelled', 'Cancelled'),
        ('refunded', 'Refunded'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=50, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='invoices')
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='draft', db_index=True)
    # Cash, Card, Insurance, Mobile Money
    payment_method = models.CharField(max_length=50, null=True, blank=True)
    insurance_claim_ref = models.CharField(max_length=255, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def balance(self):
        return self.total_amount - self.paid_amount

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"


class InvoiceItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=255)
    # consultation, lab, pharmacy, procedure, etc.
    category = models.CharField(max_length=50, null=True, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.description} x{self.quantity}"


class PatientDataAccessRule(models.Model):
    """Stored override of which roles may view/edit a patient data category."""
    category = models.CharField(max_length=50, unique=True)
    view_roles = models.JSONField(default=list)
    edit_roles = models.JSONField(default=list)
    updated_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.category


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    ip = models.GenericIPAddressField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"


class TransactionLog(models.Model):
    """Money movement trail for appointment fees and invoice payments."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # External/billing transaction ID
    trans_id = models.CharField(max_length=100, db_index=True)
    # pending, completed, failed, refunded
    status = models.CharField(max_length=30)
    step = models.CharField(max_length=50, null=True, blank=True)
    response_code = models.CharField(max_length=20, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    data = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.trans_id} {self.status}"
