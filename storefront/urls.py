"""Root URL configuration; every API app is mounted under /api/."""

from django.contrib import admin
from django.urls import include, path

from common.api.views import BaseInfoAPIView, HealthCheckAPIView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("user_auth_app.api.urls")),
    path("api/", include("profiles.api.urls")),
    path("api/", include("games.api.urls")),
    path("api/", include("orders.api.urls")),
    path("api/", include("reviews.api.urls")),
    path("api/base-info/", BaseInfoAPIView.as_view(), name="base-info"),
    path("api/health/", HealthCheckAPIView.as_view(), name="health"),
]
