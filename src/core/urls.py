"""Root URL configuration for the Blog Workflow API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from .views import IndexView

urlpatterns = [
    path("", IndexView.as_view(), name="index"),
    path("api/auth/", include("authentication.urls")),
    path("api/public/", include("posts.public_urls")),
    path("api/", include("posts.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
]
