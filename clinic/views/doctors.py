from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest, Conflict
from ..models import Doctor, Employee
from ..permissions import module_permission
from ..serializers.staff import DoctorCreateSerializer
from ..services.audit import log_action

DoctorsPermission = module_permission('doctors')


def doctor_json(d: Doctor) -> dict:
    e = d.staff
    return {
        'id': str(d.id),
        'staffId': str(e.id),
        'employeeCode': e.employee_code,
        'name': f'Dr. {e.full_name}',
        'specialisation': e.specialisation,
        'department': e.department.name if e.department_id else None,
        'phone': e.phone,
        'email': e.email,
        'status': e.status,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, DoctorsPermission])
def doctors(request):
    """Doctors directory.  ``POST {"staffId"}`` marks an employee as a doctor."""
    if request.method == 'POST':
        s = DoctorCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        employee = Employee.objects.filter(id=s.validated_data['staffId'], deleted_at__isnull=True).first()
        if not employee:
            raise BadRequest('Staff member not found')
        if Doctor.objects.filter(staff=employee).exists():
            raise Conflict('Staff member is already a doctor')
        d = Doctor.objects.create(staff=employee)
        log_action(user=request.user, action='doctor_add', object_type='doctor', object_id=d.id, request=request)
        return Response(doctor_json(d), status=status.HTTP_201_CREATED)

    qs = (
        Doctor.objects.select_related('staff', 'staff__department')
        .filter(staff__deleted_at__isnull=True)
        .order_by('staff__first_name', 'staff__last_name')
    )
    return Response({'doctors': [doctor_json(d) for d in qs]})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, DoctorsPermission])
def doctor_detail(request, doctor_id):
    d = Doctor.objects.filter(id=doctor_id).first()
    if not d:
        raise NotFound('Doctor not found')
    d.delete()
    log_action(user=request.user, action='doctor_remove', object_type='doctor', object_id=doctor_id, request=request)
    return Response({'success': True})
