from rest_framework import serializers

from .common import CleanCharField


class InvoiceItemSerializer(serializers.Serializer):
    description = CleanCharField(required=True, max_length=255)
    category = CleanCharField(max_length=50)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unitPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, source='unit_price')


class InvoiceCreateSerializer(serializers.Serializer):
    patientId = serializers.UUIDField(source='patient_id')
    items = InvoiceItemSerializer(many=True, required=False, default=list)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    status = serializers.ChoiceField(choices=['draft', 'pending'], required=False, default='pending')
    paymentMethod = CleanCharField(max_length=50, source='payment_method')
    insuranceClaimRef = CleanCharField(max_length=255, source='insurance_claim_ref')
    notes = CleanCharField()


class InvoiceListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    patientId = serializers.UUIDField(required=False)


class InvoiceActionSerializer(serializers.Serializer):
    action = serializers.CharField(required=False, allow_blank=True, default='')
    # parsed by the payment handler so a bad value reads "amount must be a number"
    amount = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    paymentMethod = CleanCharField(max_length=50)
