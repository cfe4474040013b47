"""
Django admin registrations for the clinic models.

Registering the models here lets administrators inspect records via
the ``/admin/`` URL and make manual corrections, for instance fixing a
mistyped patient number or re-activating a stock item.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AppointmentTransition,
    AuditEvent,
    Department,
    Doctor,
    Employee,
    Facility,
    FacilityTeam,
    Invoice,
    InvoiceItem,
    Patient,
    PatientClerking,
    PatientDataAccessRule,
    PharmacyStock,
    Prescription,
    TransactionLog,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'status', 'facility', 'is_staff')
    list_filter = ('role', 'status')
    search_fields = ('email', 'name', 'username')


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'facility_type', 'district', 'is_active', 'deleted_at')
    list_filter = ('facility_type', 'is_active')
    search_fields = ('code', 'name')


@admin.register(FacilityTeam)
class FacilityTeamAdmin(admin.ModelAdmin):
    list_display = ('staff', 'facility', 'status', 'deleted_at')
    list_filter = ('status', 'facility')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'head_of_department', 'is_active')
    search_fields = ('name', 'code')


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('employee_code', 'first_name', 'last_name', 'job_title', 'department', 'status')
    list_filter = ('status', 'department', 'employment_type')
    search_fields = ('employee_code', 'first_name', 'last_name', 'email')


admin.site.register(Doctor)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('uhid', 'name', 'gender', 'phone', 'insurance_type', 'is_active')
    list_filter = ('is_active', 'insurance_type')
    search_fields = ('uhid', 'name', 'phone')


@admin.register(PatientClerking)
class PatientClerkingAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'arrival_source', 'date_of_arrival', 'time_of_arrival', 'status')
    list_filter = ('arrival_source', 'status')
    search_fields = ('patient_name', 'patient_id')


class AppointmentTransitionInline(admin.TabularInline):
    model = AppointmentTransition
    extra = 0
    readonly_fields = ('action', 'from_status', 'to_status', 'operator', 'timestamp')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'status', 'appointment_fee', 'allocated_doctor', 'allocated_date',
                    'allocated_time', 'created_at')
    list_filter = ('status', 'allocated_date')
    search_fields = ('patient_name', 'patient_id', 'allocated_doctor')
    inlines = [AppointmentTransitionInline]


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'medication', 'dosage', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('patient_name', 'patient_id', 'medication')


@admin.register(PharmacyStock)
class PharmacyStockAdmin(admin.ModelAdmin):
    list_display = ('drug_name', 'strength', 'quantity_in_stock', 'reorder_level', 'expiry_date', 'is_active')
    list_filter = ('is_active', 'form')
    search_fields = ('drug_name', 'generic_name', 'batch_number')


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'patient', 'total_amount', 'paid_amount', 'status', 'created_at')
    list_filter = ('status', 'payment_method')
    search_fields = ('invoice_number', 'patient__name', 'patient__uhid')
    inlines = [InvoiceItemInline]


@admin.register(PatientDataAccessRule)
class PatientDataAccessRuleAdmin(admin.ModelAdmin):
    list_display = ('category', 'view_roles', 'edit_roles', 'updated_by', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'ip', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)


@admin.register(TransactionLog)
class TransactionLogAdmin(admin.ModelAdmin):
    list_display = ('trans_id', 'status', 'step', 'created_at')
    list_filter = ('status', 'step')
    search_fields = ('trans_id',)
