"""
URL mappings for the HMIS backend API.

This module registers all API endpoints with their corresponding view
functions.  Paths match the front-end's fetch calls, so trailing
slashes are deliberately omitted.
"""
from django.urls import path, include

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import (
    access,
    appointments,
    billing,
    clerking,
    departments,
    doctors,
    facilities,
    health,
    patients,
    pharmacy,
    prescriptions,
    reports,
    staff,
    users,
)


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view),
    path('api/auth/me', me_view),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', jwt_logout_view),
    path('api/auth/permissions', access.my_permissions),
    path('api/roles', access.roles),
    path('api/settings/patient-data-access', access.patient_data_access),
    # Patients & clerking
    path('api/patients', patients.patients),
    path('api/patients/<uuid:patient_id>', patients.patient_detail),
    path('api/clerking', clerking.clerking),
    path('api/clerking/<uuid:record_id>', clerking.clerking_detail),
    # Appointments (id validated by the view so a bad id is a 400)
    path('api/appointments', appointments.appointments),
    path('api/appointments/<str:appointment_id>', appointments.appointment_detail),
    path('api/appointments/<str:appointment_id>/transitions', appointments.appointment_transitions),
    # Pharmacy
    path('api/prescriptions', prescriptions.prescriptions),
    path('api/prescriptions/<uuid:prescription_id>', prescriptions.prescription_detail),
    path('api/pharmacy/stock', pharmacy.stock_list),
    path('api/pharmacy/stock/<uuid:stock_id>', pharmacy.stock_detail),
    # Billing
    path('api/invoices', billing.invoices),
    path('api/invoices/<uuid:invoice_id>', billing.invoice_detail),
    path('api/transactions', billing.transactions),
    # Facilities
    path('api/facilities', facilities.facilities),
    path('api/facilities/<uuid:facility_id>', facilities.facility_detail),
    path('api/facility-team', facilities.facility_team),
    path('api/facility-team/<uuid:member_id>', facilities.facility_team_detail),
    # Staff directory
    path('api/departments', departments.departments),
    path('api/departments/<uuid:department_id>', departments.department_detail),
    path('api/staff', staff.employees),
    path('api/staff/<uuid:employee_id>', staff.employee_detail),
    path('api/doctors', doctors.doctors),
    path('api/doctors/<uuid:doctor_id>', doctors.doctor_detail),
    path('api/users', users.users),
    # Reports
    path('api/reports', reports.report_index),
    path('api/reports/<str:report_type>', reports.report_detail),
]
