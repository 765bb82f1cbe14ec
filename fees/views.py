"""
Fee ledger API views: catalog, structures, assignment, dues, wallet, reports.
Each view validates the body, calls one service and renders the result.
"""
from datetime import date

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsAdminStudentOrParent, can_view_student_finance
from classes.services import get_class
from core.exceptions import InvalidInputError, NotFoundError
from core.utils import belongs_to_user_organization
from students.models import StudentProfile
from students.serializers import StudentProfileSerializer, WalletEntrySerializer
from students.wallet import wallet_summary
from payments.serializers import FeeTransactionSerializer
from .serializers import (
    BulkAssignSerializer,
    FeeAdjustSerializer,
    FeeCategoryInputSerializer,
    FeeCategorySerializer,
    FeeStructureCreateSerializer,
    FeeStructureSerializer,
    FeeStructureUpdateSerializer,
    StudentFeeSerializer,
)
from .services import categories, ledger, propagation, reports, structures


def get_visible_class(request, class_id):
    """SchoolClass in the caller's organization (multi-tenant mode), else 404."""
    school_class = get_class(class_id)
    if not belongs_to_user_organization(school_class, request.user):
        raise NotFoundError('Class not found')
    return school_class


def get_visible_student(request, student_id):
    """StudentProfile the caller may see finance data for, else 404/403."""
    try:
        student = StudentProfile.objects.select_related('user').get(pk=student_id)
    except StudentProfile.DoesNotExist:
        raise NotFoundError('Student not found')
    if not can_view_student_finance(request.user, student):
        raise PermissionDenied('You do not have access to this student')
    return student


# ----- catalog -----

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def category_list_view(request):
    """
    GET /api/fees/categories - all categories
    POST /api/fees/categories - {name, description?}
    """
    if request.method == 'GET':
        return Response(FeeCategorySerializer(categories.list_categories(), many=True).data)

    serializer = FeeCategoryInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    category = categories.create_category(data.get('name'), data.get('description', ''))
    return Response(FeeCategorySerializer(category).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def category_detail_view(request, pk):
    if request.method == 'DELETE':
        categories.delete_category(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = FeeCategoryInputSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    category = categories.update_category(
        pk,
        name=data.get('name'),
        description=data.get('description'),
        is_active=data.get('isActive'),
    )
    return Response(FeeCategorySerializer(category).data)


# ----- structures -----

@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def structure_create_view(request):
    """
    POST /api/fees/structures
    Body: {classId, categoryId, amount, dueDate, description?}
    """
    serializer = FeeStructureCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    structure = structures.create_structure(
        data['classId'], data['categoryId'], data['amount'], data['dueDate'], data.get('description', ''),
    )
    return Response(FeeStructureSerializer(structure).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def structures_for_class_view(request, class_id):
    school_class = get_visible_class(request, class_id)
    qs = structures.list_structures_for_class(school_class.pk)
    return Response(FeeStructureSerializer(qs, many=True).data)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def structure_detail_view(request, pk):
    """
    PATCH /api/fees/structures/<id> - edit; amount/dueDate changes reach every student's bill
    DELETE /api/fees/structures/<id> - delete with bills; paid money goes to wallets
    """
    if request.method == 'DELETE':
        summary = structures.delete_structure(pk)
        return Response({
            'message': 'Fee structure deleted',
            'deletedFees': summary['deleted_fees'],
            'refundedStudents': summary['refunded_students'],
            'totalRefunded': float(summary['total_refunded']),
            'relinkedTransactions': summary['relinked_transactions'],
        })

    serializer = FeeStructureUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    structure, propagated = structures.update_structure(
        pk,
        amount=data.get('amount'),
        due_date=data.get('dueDate'),
        title=data.get('title'),
        is_active=data.get('isActive'),
        description=data.get('description'),
    )
    payload = FeeStructureSerializer(structure).data
    if propagated is not None:
        payload['propagation'] = {
            'updatedFees': propagated['updated'],
            'walletCredits': propagated['wallet_credits'],
            'totalCredited': float(propagated['total_credited']),
        }
    return Response(payload)


# ----- assignment -----

@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def bulk_assign_view(request):
    """
    POST /api/fees/assign/bulk
    Body: {classId, feeStructureId}. Students already billed are skipped.
    """
    serializer = BulkAssignSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    result = propagation.assign_structure_to_class(
        data['classId'], data['feeStructureId'], collected_by=request.user,
    )
    code = status.HTTP_201_CREATED if result['created'] else status.HTTP_200_OK
    return Response({
        'created': result['created'],
        'skipped': result['skipped'],
        'autoAppliedStudents': result['auto_applied_students'],
        'totalAutoApplied': float(result['total_auto_applied']),
        'fees': StudentFeeSerializer(result['student_fees'], many=True).data,
    }, status=code)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def unassign_view(request, fee_id):
    result = propagation.unassign_fee(fee_id)
    return Response({
        'message': 'Fee unassigned',
        'studentFeeId': result['student_fee_id'],
        'walletCredited': float(result['credited']),
        'relinkedTransactions': result['relinked_transactions'],
    })


# ----- dues -----

@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def class_dues_view(request, class_id):
    school_class = get_visible_class(request, class_id)
    qs = ledger.dues_for_class(school_class)
    return Response(StudentFeeSerializer(qs, many=True).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdmin])
def adjust_fee_view(request, fee_id):
    """
    PATCH /api/fees/dues/adjust/<fee_id>
    Body: {discountAmount?, fineAmount?, remarks?}
    """
    serializer = FeeAdjustSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    fee = ledger.apply_discount_or_fine(
        fee_id,
        discount_amount=data.get('discountAmount'),
        fine_amount=data.get('fineAmount'),
        remarks=data.get('remarks'),
    )
    return Response(StudentFeeSerializer(fee).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminStudentOrParent])
def student_dues_view(request, student_id):
    student = get_visible_student(request, student_id)
    fees = list(ledger.fees_for_student(student))
    return Response({
        'studentId': student.pk,
        'student': StudentProfileSerializer(student).data,
        'totalDue': float(sum((f.due_amount for f in fees), 0)),
        'walletBalance': float(student.wallet_balance),
        'fees': StudentFeeSerializer(fees, many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminStudentOrParent])
def wallet_view(request, student_id):
    student = get_visible_student(request, student_id)
    summary = wallet_summary(student)
    return Response({
        'studentId': summary['student_id'],
        'balance': float(summary['balance']),
        'entries': WalletEntrySerializer(summary['entries'], many=True).data,
    })


# ----- reports -----

@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def daily_report_view(request):
    """GET /api/fees/reports/daily?date=YYYY-MM-DD (default: today in TIME_ZONE)"""
    raw = (request.query_params.get('date') or '').strip()
    day = None
    if raw:
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            raise InvalidInputError('date must be YYYY-MM-DD')
    report = reports.daily_collection(day)
    return Response({
        'date': report['date'].isoformat(),
        'total': float(report['total']),
        'count': report['count'],
        'byMethod': {
            method: {'total': float(row['total']), 'count': row['count']}
            for method, row in report['by_method'].items()
        },
        'transactions': FeeTransactionSerializer(report['transactions'], many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def pending_report_view(request):
    """GET /api/fees/reports/pending?classId="""
    raw = (request.query_params.get('classId') or '').strip()
    class_id = None
    if raw:
        if not raw.isdigit():
            raise InvalidInputError('classId must be an integer')
        class_id = int(raw)
    report = reports.pending_dues(class_id)
    return Response({
        'totalDue': float(report['total_due']),
        'count': report['count'],
        'byClass': [
            {
                'classId': row['class_id'],
                'className': row['class_name'],
                'year': row['year'],
                'count': row['count'],
                'totalDue': float(row['total_due']),
            }
            for row in report['by_class']
        ],
        'records': StudentFeeSerializer(report['records'], many=True).data,
    })
