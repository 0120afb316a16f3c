from django.urls import path
from .views import (
    AdminOrderListAPIView,
    OrderDetailAPIView,
    OrderListCreateAPIView,
    OrderRefundRequestAPIView,
    OrderRefundResolveAPIView,
    OrderStatsAPIView,
    OrderStatusUpdateAPIView,
)

urlpatterns = [
    path("orders/", OrderListCreateAPIView.as_view(), name="order-list"),
    path("orders/<int:pk>/", OrderDetailAPIView.as_view(), name="order-detail"),
    path("orders/<int:pk>/refund/", OrderRefundRequestAPIView.as_view(), name="order-refund"),
    path("orders/<int:pk>/refund/resolve/", OrderRefundResolveAPIView.as_view(), name="order-refund-resolve"),
    path("orders/<int:pk>/status/", OrderStatusUpdateAPIView.as_view(), name="order-status"),
    path("orders/admin/all/", AdminOrderListAPIView.as_view(), name="order-admin-list"),
    path("orders/stats/summary/", OrderStatsAPIView.as_view(), name="order-stats"),
]
