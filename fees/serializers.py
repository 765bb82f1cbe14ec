"""
Serializers for fees app. Output keys are camelCase; amounts are rendered as numbers.
"""
from rest_framework import serializers

from .models import FeeCategory, FeeStructure, StudentFee


def _amount_field(**kwargs):
    # Precision is not checked here: the ledger service rounds to cents (half-up).
    return serializers.DecimalField(max_digits=None, decimal_places=None, **kwargs)


class FeeCategorySerializer(serializers.ModelSerializer):
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = FeeCategory
        fields = ['id', 'name', 'description', 'isActive', 'createdAt']


class FeeCategoryInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False)


class FeeStructureSerializer(serializers.ModelSerializer):
    classId = serializers.IntegerField(source='school_class_id', read_only=True)
    className = serializers.CharField(source='school_class.name', read_only=True)
    year = serializers.CharField(source='school_class.year', read_only=True)
    categoryId = serializers.IntegerField(source='category_id', read_only=True)
    categoryName = serializers.CharField(source='category.name', read_only=True)
    dueDate = serializers.DateField(source='due_date', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = FeeStructure
        fields = [
            'id', 'title', 'description', 'amount', 'dueDate', 'isActive',
            'classId', 'className', 'year', 'categoryId', 'categoryName',
            'createdAt', 'updatedAt',
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['amount'] = float(instance.amount)
        return data


class FeeStructureCreateSerializer(serializers.Serializer):
    classId = serializers.IntegerField()
    categoryId = serializers.IntegerField()
    amount = _amount_field()
    dueDate = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True, default='')


class FeeStructureUpdateSerializer(serializers.Serializer):
    amount = _amount_field(required=False)
    dueDate = serializers.DateField(required=False)
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False)


class BulkAssignSerializer(serializers.Serializer):
    classId = serializers.IntegerField()
    feeStructureId = serializers.IntegerField()


class FeeAdjustSerializer(serializers.Serializer):
    discountAmount = _amount_field(required=False)
    fineAmount = _amount_field(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True)


class StudentFeeSerializer(serializers.ModelSerializer):
    """Ledger row. Amount fields are derived by the ledger service, never by the client."""
    studentId = serializers.IntegerField(source='student_profile_id', read_only=True)
    studentName = serializers.CharField(source='student_profile.user.full_name', read_only=True)
    classId = serializers.IntegerField(source='school_class_id', read_only=True)
    feeStructureId = serializers.IntegerField(source='fee_structure_id', read_only=True)
    title = serializers.CharField(source='fee_structure.title', read_only=True)
    dueDate = serializers.DateField(source='due_date', read_only=True)
    academicYear = serializers.CharField(source='academic_year', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    AMOUNT_FIELDS = {
        'baseAmount': 'base_amount',
        'discountAmount': 'discount_amount',
        'fineAmount': 'fine_amount',
        'totalPayable': 'total_payable',
        'paidAmount': 'paid_amount',
        'dueAmount': 'due_amount',
    }

    class Meta:
        model = StudentFee
        fields = [
            'id', 'studentId', 'studentName', 'classId', 'feeStructureId', 'title',
            'status', 'dueDate', 'academicYear', 'remarks', 'updatedAt',
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        for key, attr in self.AMOUNT_FIELDS.items():
            data[key] = float(getattr(instance, attr))
        return data
