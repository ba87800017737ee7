"""The ``{data, errors}`` envelope and base classes that apply it."""

from typing import Any, Iterable, Optional

from django.http import JsonResponse
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ViewSet


def envelope(data: Any = None, errors: Optional[Iterable[Any]] = None) -> dict[str, Any]:
    """Build the body shared by every JSON response."""
    return {"data": data, "errors": list(errors or [])}


def api_response(data: Any, status: int = 200) -> Response:
    """Successful DRF response wrapped in the envelope."""
    return Response(envelope(data), status=status)


def error_response(message: str, status: int) -> JsonResponse:
    """Plain Django error response for code running outside DRF (middleware)."""
    return JsonResponse(envelope(errors=[message]), status=status)


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and "data" in payload and "errors" in payload


class EnvelopeMixin:
    """Wrap successful responses that views returned without the envelope."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        if hasattr(response, "data") and response.status_code and response.status_code < 400:
            # 204 responses carry no body.
            if response.status_code != 204 and not _is_enveloped(response.data):
                response.data = envelope(response.data)
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    pass


class BaseViewSet(EnvelopeMixin, ViewSet):
    """Service-backed ViewSet; handlers call services, not querysets."""


__all__ = ["BaseAPIView", "BaseViewSet", "EnvelopeMixin", "api_response", "envelope", "error_response"]
