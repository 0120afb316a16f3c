from django.urls import path
from .views import (
    LibraryListView,
    LibraryPlaytimeView,
    ProfileView,
    UserAdminListView,
    UserStatusView,
    WishlistListView,
    WishlistToggleView,
)

urlpatterns = [
    path("profile/", ProfileView.as_view(), name="profile"),
    path("profile/library/", LibraryListView.as_view(), name="profile-library"),
    path("profile/library/<int:game_id>/playtime/", LibraryPlaytimeView.as_view(), name="profile-library-playtime"),
    path("profile/wishlist/", WishlistListView.as_view(), name="profile-wishlist"),
    path("profile/wishlist/<int:game_id>/", WishlistToggleView.as_view(), name="profile-wishlist-toggle"),
    path("users/", UserAdminListView.as_view(), name="user-list"),
    path("users/<int:pk>/status/", UserStatusView.as_view(), name="user-status"),
]
