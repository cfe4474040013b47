from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..module_permissions import REPORT_TYPES, reports_for_role
from ..permissions import CanViewReport, IsStaffRole
from ..services.reports import build_report


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def report_index(request):
    """Report types the caller may open."""
    return Response({'reports': reports_for_role(getattr(request.user, 'role', None))})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewReport])
def report_detail(request, report_type):
    if report_type not in REPORT_TYPES:
        raise NotFound('Unknown report type')
    return Response({'type': report_type, 'data': build_report(report_type)})
