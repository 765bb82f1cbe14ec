"""
Serializers for payments app
"""
from rest_framework import serializers

from .models import FeeTransaction


class FeeTransactionSerializer(serializers.ModelSerializer):
    """Transaction log entry / receipt. studentFeeId is null once its bill is deleted."""
    transactionId = serializers.CharField(source='transaction_id', read_only=True)
    studentId = serializers.IntegerField(source='student_profile_id', read_only=True)
    studentFeeId = serializers.IntegerField(source='student_fee_id', read_only=True, allow_null=True)
    feeTitle = serializers.SerializerMethodField()
    paymentMethod = serializers.CharField(source='method', read_only=True)
    paidAt = serializers.DateTimeField(source='paid_at', read_only=True)
    collectedBy = serializers.SerializerMethodField()

    class Meta:
        model = FeeTransaction
        fields = [
            'id', 'transactionId', 'studentId', 'studentFeeId', 'feeTitle',
            'paymentMethod', 'status', 'paidAt', 'collectedBy', 'remarks',
        ]

    def get_feeTitle(self, obj):
        if obj.student_fee_id is None:
            return None
        return obj.student_fee.fee_structure.title

    def get_collectedBy(self, obj):
        if obj.collected_by_id is None:
            return None
        return {'id': obj.collected_by_id, 'fullName': obj.collected_by.full_name}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['amount'] = float(instance.amount)
        data['appliedAmount'] = float(instance.applied_amount)
        data['walletAmount'] = float(instance.wallet_amount)
        return data


class CollectFeeSerializer(serializers.Serializer):
    """POST /api/fees/pay body. Range and method checks happen in payments.services."""
    studentFeeId = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    paymentMethod = serializers.CharField(max_length=20)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    idempotencyKey = serializers.CharField(required=False, allow_blank=True, max_length=100)
