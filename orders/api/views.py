"""Orders API views.

List and create orders on the same endpoint; a buyer only ever sees their own
orders. Provide detail retrieval, the refund request, and the staff-only
endpoints: ledger listing with search, status updates, refund resolution and
summary statistics. Business rules live in orders.services; views translate
HTTP to service calls.
"""

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders import services
from orders.models import Order
from .permissions import IsAdminStaff, IsOrderOwner
from .serializers import (
    OrderCreateSerializer,
    OrderListSerializer,
    OrderOutputSerializer,
    OrderStatusUpdateSerializer,
    RefundRequestSerializer,
    RefundResolveSerializer,
)


class OrdersPagination(PageNumberPagination):
    """Buyer order history pagination."""

    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 50


class AdminOrdersPagination(PageNumberPagination):
    """Staff ledger pagination."""

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


# ----------------------------- helpers (module-level) -----------------------------

def _apply_status_filter(qs, params):
    """Filter by ?status=...; raises ValidationError on unknown values."""
    value = params.get("status")
    if value:
        if value not in Order.Status.values:
            raise ValidationError({"status": f"Allowed values: {', '.join(Order.Status.values)}."})
        qs = qs.filter(status=value)
    return qs


def _validate_patch_only(data, allowed):
    """Allow only `allowed` keys; return a 400 Response listing the rest, else None."""
    extra = set(data.keys()) - set(allowed)
    if extra:
        return Response(
            {
                "detail": f"Only {', '.join(repr(a) for a in sorted(allowed))} may be updated. "
                f"Invalid fields: {', '.join(sorted(extra))}.",
                "code": "invalid",
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    return None


def _full_order(pk):
    return (
        Order.objects.select_related("user")
        .prefetch_related("items", "status_history")
        .get(pk=pk)
    )


# --------------------------------------- views ---------------------------------------

class OrderListCreateAPIView(generics.ListCreateAPIView):
    """GET: paginated own orders (optional ?status=).
    POST: checkout a cart into a new order.
    """

    permission_classes = [IsAuthenticated]
    pagination_class = OrdersPagination

    def get_serializer_class(self):
        """Use list serializer for GET and input serializer for POST."""
        return OrderListSerializer if self.request.method == "GET" else OrderCreateSerializer

    # --- GET ---
    def get_queryset(self):
        """Return only orders placed by the authenticated user, newest first."""
        qs = (
            Order.objects.filter(user=self.request.user)
            .select_related("user")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )
        return _apply_status_filter(qs, self.request.query_params)

    # --- POST ---
    def create(self, request, *args, **kwargs):
        """Validate the cart, run the fulfillment engine and return the order.

        A declined payment still returns 201 with status `failed`.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = services.create_order(
            buyer=request.user,
            items=data["items"],
            payment_method=data["payment_method"],
            billing_address=data["billing_address"],
            coupon_code=data.get("coupon_code", ""),
            coupon_discount=data.get("coupon_discount", 0),
        )
        return Response(OrderOutputSerializer(_full_order(order.pk)).data, status=status.HTTP_201_CREATED)


class OrderDetailAPIView(generics.RetrieveAPIView):
    """GET /api/orders/{id}/ -> the caller's own order (404 for foreign orders)."""

    serializer_class = OrderOutputSerializer
    permission_classes = [IsAuthenticated, IsOrderOwner]

    def get_queryset(self):
        return (
            Order.objects.filter(user=self.request.user)
            .select_related("user")
            .prefetch_related("items", "status_history")
        )


class OrderRefundRequestAPIView(APIView):
    """POST /api/orders/{id}/refund/ {"reason": ...} -> order with refund recorded."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: int):
        order = get_object_or_404(Order, pk=pk)
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.request_refund(order, request.user, serializer.validated_data["reason"])
        return Response(OrderOutputSerializer(_full_order(order.pk)).data, status=status.HTTP_200_OK)


class OrderRefundResolveAPIView(APIView):
    """POST /api/orders/{id}/refund/resolve/ {"approve": bool, "note"?} (staff)."""

    permission_classes = [IsAuthenticated, IsAdminStaff]

    def post(self, request, pk: int):
        order = get_object_or_404(Order, pk=pk)
        serializer = RefundResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.resolve_refund(
            order,
            approve=serializer.validated_data["approve"],
            note=serializer.validated_data["note"],
            actor=request.user,
        )
        return Response(OrderOutputSerializer(_full_order(order.pk)).data, status=status.HTTP_200_OK)


class OrderStatusUpdateAPIView(APIView):
    """PATCH /api/orders/{id}/status/ {"status": ..., "note"?} (staff)."""

    permission_classes = [IsAuthenticated, IsAdminStaff]

    def patch(self, request, pk: int):
        bad = _validate_patch_only(request.data, {"status", "note"})
        if bad is not None:
            return bad
        order = get_object_or_404(Order, pk=pk)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.change_status(
            order,
            serializer.validated_data["status"],
            note=serializer.validated_data["note"],
            actor=request.user,
        )
        return Response(OrderOutputSerializer(_full_order(order.pk)).data, status=status.HTTP_200_OK)


class AdminOrderListAPIView(generics.ListAPIView):
    """GET /api/orders/admin/all/ (staff) with ?status= and ?search=."""

    serializer_class = OrderListSerializer
    permission_classes = [IsAuthenticated, IsAdminStaff]
    pagination_class = AdminOrdersPagination

    def get_queryset(self):
        qs = (
            Order.objects.select_related("user")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )
        params = self.request.query_params
        qs = _apply_status_filter(qs, params)
        search = params.get("search")
        if search:
            qs = qs.filter(
                Q(order_number__icontains=search)
                | Q(billing_email__icontains=search)
                | Q(billing_first_name__icontains=search)
                | Q(billing_last_name__icontains=search)
            )
        return qs


class OrderStatsAPIView(APIView):
    """GET /api/orders/stats/summary/ (staff) -> ledger totals and recent orders."""

    permission_classes = [IsAuthenticated, IsAdminStaff]

    def get(self, request):
        stats = services.summary_stats()
        stats["total_revenue"] = f"{stats['total_revenue']:.2f}"
        stats["recent_orders"] = OrderListSerializer(stats["recent_orders"], many=True).data
        return Response(stats, status=status.HTTP_200_OK)
