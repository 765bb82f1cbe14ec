"""
Serializers for students app
"""
from rest_framework import serializers
from .models import StudentProfile, WalletEntry


class StudentProfileSerializer(serializers.ModelSerializer):
    """Student Profile serializer. status from deleted_at."""
    email = serializers.EmailField(source='user.email', read_only=True)
    fullName = serializers.CharField(source='user.full_name', read_only=True)
    admissionNo = serializers.CharField(source='admission_no', read_only=True, allow_null=True)
    walletBalance = serializers.DecimalField(source='wallet_balance', max_digits=12, decimal_places=2, read_only=True)
    status = serializers.SerializerMethodField()

    class Meta:
        model = StudentProfile
        fields = ['id', 'email', 'fullName', 'admissionNo', 'walletBalance', 'status']
        read_only_fields = fields

    def get_status(self, obj):
        return 'deleted' if obj.deleted_at else 'active'

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['walletBalance'] = float(instance.wallet_balance)
        return data


class WalletEntrySerializer(serializers.ModelSerializer):
    amountDelta = serializers.SerializerMethodField()
    balanceAfter = serializers.SerializerMethodField()
    studentFeeId = serializers.IntegerField(source='student_fee_id', read_only=True, allow_null=True)
    transactionId = serializers.CharField(source='fee_transaction.transaction_id', read_only=True, allow_null=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = WalletEntry
        fields = ['id', 'reason', 'amountDelta', 'balanceAfter', 'studentFeeId', 'transactionId', 'note', 'createdAt']

    def get_amountDelta(self, obj):
        return float(obj.amount_delta)

    def get_balanceAfter(self, obj):
        return float(obj.balance_after)
