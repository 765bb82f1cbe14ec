"""
URLs for fees app (mounted at /api/fees/)
"""
from django.urls import path

from payments import views as payment_views
from . import views

app_name = 'fees'

urlpatterns = [
    path('categories', views.category_list_view, name='category-list'),
    path('categories/<int:pk>', views.category_detail_view, name='category-detail'),
    path('structures', views.structure_create_view, name='structure-create'),
    path('structures/class/<int:class_id>', views.structures_for_class_view, name='structures-for-class'),
    path('structures/<int:pk>', views.structure_detail_view, name='structure-detail'),
    path('assign/bulk', views.bulk_assign_view, name='assign-bulk'),
    path('assign/<int:fee_id>', views.unassign_view, name='unassign'),
    path('dues/class/<int:class_id>', views.class_dues_view, name='class-dues'),
    path('dues/adjust/<int:fee_id>', views.adjust_fee_view, name='adjust-fee'),
    path('dues/student/<int:student_id>', views.student_dues_view, name='student-dues'),
    path('wallet/<int:student_id>', views.wallet_view, name='wallet'),
    path('reports/daily', views.daily_report_view, name='report-daily'),
    path('reports/pending', views.pending_report_view, name='report-pending'),
    path('pay', payment_views.collect_fee_view, name='pay'),
    path('history/<int:student_id>', payment_views.payment_history_view, name='payment-history'),
    path('receipt/<str:transaction_id>', payment_views.receipt_view, name='receipt'),
]
