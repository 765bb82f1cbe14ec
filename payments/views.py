"""
Payment API views: collect, history, receipt.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsAdminStudentOrParent, can_view_student_finance
from fees.serializers import StudentFeeSerializer
from fees.views import get_visible_student
from . import services
from .serializers import CollectFeeSerializer, FeeTransactionSerializer


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def collect_fee_view(request):
    """
    POST /api/fees/pay
    Body: {studentFeeId, amount, paymentMethod, remarks?, idempotencyKey?}
    The Idempotency-Key header takes precedence over idempotencyKey in the body.
    Overpayment is split: the bill is settled and the rest goes to the wallet.
    """
    serializer = CollectFeeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    key = request.headers.get('Idempotency-Key') or data.get('idempotencyKey')

    result = services.collect_fee(
        data['studentFeeId'],
        data['amount'],
        data['paymentMethod'],
        remarks=data.get('remarks', ''),
        collected_by=request.user,
        idempotency_key=key,
    )
    wallet_credit = result['wallet_credit']
    if wallet_credit > 0:
        message = f'Payment recorded. {wallet_credit} credited to wallet.'
    else:
        message = 'Payment recorded.'
    return Response({
        'message': message,
        'replayed': result['replayed'],
        'walletCredit': float(wallet_credit),
        'transaction': FeeTransactionSerializer(result['transaction']).data,
        'fee': StudentFeeSerializer(result['student_fee']).data,
    }, status=status.HTTP_200_OK if result['replayed'] else status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminStudentOrParent])
def payment_history_view(request, student_id):
    student = get_visible_student(request, student_id)
    qs = services.payment_history(student)
    return Response(FeeTransactionSerializer(qs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminStudentOrParent])
def receipt_view(request, transaction_id):
    txn = services.get_receipt(transaction_id)
    if not can_view_student_finance(request.user, txn.student_profile):
        raise PermissionDenied('You do not have access to this receipt')
    data = FeeTransactionSerializer(txn).data
    data['studentName'] = txn.student_profile.user.full_name
    if txn.student_fee_id is not None:
        data['className'] = txn.student_fee.school_class.name
        data['academicYear'] = txn.student_fee.academic_year
    return Response(data)
