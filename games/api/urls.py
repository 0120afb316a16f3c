from django.urls import path
from .views import GameListCreateAPIView, GameRetrieveUpdateDestroyAPIView

urlpatterns = [
    path("games/", GameListCreateAPIView.as_view(), name="game-list"),
    path("games/<int:pk>/", GameRetrieveUpdateDestroyAPIView.as_view(), name="game-detail"),
]
