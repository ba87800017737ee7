"""Service banner served at the site root."""

from typing import Any

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny

from core.response import BaseAPIView, api_response

API_VERSION = "1.0.0"


class IndexView(BaseAPIView):
    permission_classes: list[Any] = [AllowAny]

    @extend_schema(auth=[])
    def get(self, request):
        """Report that the API is up."""
        return api_response(
            {
                "message": "Blog API is running",
                "version": API_VERSION,
                "timestamp": timezone.now().isoformat(),
            }
        )
