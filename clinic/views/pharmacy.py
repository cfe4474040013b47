from django.db.models import F, Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import PharmacyStock
from ..permissions import module_permission
from ..serializers.pharmacy import PharmacyStockSerializer
from ..services.audit import log_action

MedicinePermission = module_permission('medicine_management')


def stock_json(s: PharmacyStock) -> dict:
    return {
        'id': str(s.id),
        'drugName': s.drug_name,
        'genericName': s.generic_name,
        'form': s.form,
        'strength': s.strength,
        'quantityInStock': s.quantity_in_stock,
        'reorderLevel': s.reorder_level,
        'lowStock': s.is_low,
        'unit': s.unit,
        'unitCost': str(s.unit_cost),
        'sellingPrice': str(s.selling_price),
        'batchNumber': s.batch_number,
        'expiryDate': s.expiry_date.isoformat() if s.expiry_date else None,
        'supplier': s.supplier,
        'isActive': s.is_active,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, MedicinePermission])
def stock_list(request):
    """Pharmacy inventory.  ``?q=`` searches drug/generic name, ``?lowStock=1``
    keeps items at or below their reorder level."""
    if request.method == 'POST':
        s = PharmacyStockSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        item = PharmacyStock.objects.create(**s.validated_data)
        log_action(user=request.user, action='stock_create', object_type='pharmacy_stock', object_id=item.id,
                   request=request)
        return Response(stock_json(item), status=status.HTTP_201_CREATED)

    qs = PharmacyStock.objects.filter(is_active=True)
    term = (request.query_params.get('q') or '').strip()
    if term:
        qs = qs.filter(Q(drug_name__icontains=term) | Q(generic_name__icontains=term))
    if request.query_params.get('lowStock') in ('1', 'true', 'yes'):
        qs = qs.filter(quantity_in_stock__lte=F('reorder_level'))
    return Response({'stock': [stock_json(s) for s in qs.order_by('drug_name')]})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, MedicinePermission])
def stock_detail(request, stock_id):
    item = PharmacyStock.objects.filter(id=stock_id).first()
    if not item:
        raise NotFound('Stock item not found')
    if request.method == 'GET':
        return Response(stock_json(item))
    if request.method == 'DELETE':
        item.is_active = False
        item.save(update_fields=['is_active', 'updated_at'])
        log_action(user=request.user, action='stock_deactivate', object_type='pharmacy_stock', object_id=item.id,
                   request=request)
        return Response({'success': True})

    s = PharmacyStockSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    for attr, value in s.validated_data.items():
        setattr(item, attr, value)
    item.save()
    log_action(user=request.user, action='stock_update', object_type='pharmacy_stock', object_id=item.id,
               request=request)
    return Response(stock_json(item))
