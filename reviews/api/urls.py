from django.urls import path
from .views import (
    ReportedReviewListAPIView,
    ReviewDetailUpdateDeleteAPIView,
    ReviewListCreateAPIView,
    ReviewModerateAPIView,
    ReviewReportAPIView,
    ReviewVoteAPIView,
)

urlpatterns = [
    path("reviews/", ReviewListCreateAPIView.as_view(), name="review-list"),
    path("reviews/reported/", ReportedReviewListAPIView.as_view(), name="review-reported"),
    path("reviews/<int:pk>/", ReviewDetailUpdateDeleteAPIView.as_view(), name="review-detail"),
    path("reviews/<int:pk>/vote/", ReviewVoteAPIView.as_view(), name="review-vote"),
    path("reviews/<int:pk>/report/", ReviewReportAPIView.as_view(), name="review-report"),
    path("reviews/<int:pk>/moderate/", ReviewModerateAPIView.as_view(), name="review-moderate"),
]
