"""Post endpoints backed by the workflow service."""

from typing import Any

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from access_control.permissions import CanCreatePosts, CanModeratePosts, IsAuthenticatedCaller
from access_control.policy import Caller
from core.response import BaseAPIView, BaseViewSet, api_response
from .serializers import (
    PostCreateSerializer,
    PostListQuerySerializer,
    PostSerializer,
    PostUpdateSerializer,
    PublicPostDetailSerializer,
    PublicPostListSerializer,
    RecentPostSerializer,
    page_payload,
)
from .services import PostFilters, PostWorkflowService

UUID_PATTERN = r"[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}"


class WorkflowServiceMixin:
    service_class = PostWorkflowService

    def get_service(self) -> PostWorkflowService:
        return self.service_class()

    def get_caller(self) -> Caller:
        return Caller.from_user(self.request.user)  # type: ignore[attr-defined]


class PostViewSet(WorkflowServiceMixin, BaseViewSet):
    """Authoring and moderation endpoints.

    Listing and slug lookup accept anonymous callers (their visibility is
    narrowed by the policy); everything else needs a bearer token.
    """

    lookup_value_regex = UUID_PATTERN

    def get_permissions(self):
        if self.action in ("list", "by_slug"):
            return [AllowAny()]
        if self.action == "create":
            return [CanCreatePosts()]
        if self.action in ("approve", "reject"):
            return [CanModeratePosts()]
        return [IsAuthenticatedCaller()]

    @extend_schema(parameters=[PostListQuerySerializer], responses=PostSerializer(many=True))
    def list(self, request):
        """List posts visible to the caller, newest first."""
        query = PostListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        service = self.get_service()
        page = service.page_request(params.get("page"), params.get("limit"))
        filters = PostFilters(
            status=params.get("status"),
            author_id=params.get("authorId"),
            search=params.get("search"),
        )
        result = service.list_posts(self.get_caller(), filters, page)
        return api_response(page_payload(result, PostSerializer))

    @extend_schema(request=PostCreateSerializer, responses=PostSerializer)
    def create(self, request):
        """Create a post; it is queued for review unless ``draft`` is true."""
        serializer = PostCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = self.get_service().create_post(self.get_caller(), **serializer.to_service_kwargs())
        return api_response(PostSerializer(post).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=PostSerializer)
    def retrieve(self, request, pk=None):
        post = self.get_service().get_post(self.get_caller(), post_id=pk)
        return api_response(PostSerializer(post).data)

    @extend_schema(responses=PostSerializer)
    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[-\w]+)")
    def by_slug(self, request, slug=None):
        post = self.get_service().get_post(self.get_caller(), slug=slug)
        return api_response(PostSerializer(post).data)

    @extend_schema(request=PostUpdateSerializer, responses=PostSerializer)
    def update(self, request, pk=None):
        serializer = PostUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = self.get_service().update_post(self.get_caller(), pk, **serializer.to_service_kwargs())
        return api_response(PostSerializer(post).data)

    @extend_schema(request=PostUpdateSerializer, responses=PostSerializer)
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        self.get_service().delete_post(self.get_caller(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses=PostSerializer)
    @action(detail=True, methods=["patch"])
    def submit(self, request, pk=None):
        """Send a draft or rejected post to the review queue."""
        post = self.get_service().submit_post(self.get_caller(), pk)
        return api_response(PostSerializer(post).data)

    @extend_schema(request=None, responses=PostSerializer)
    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):
        """Publish a pending post (ADMIN only)."""
        post = self.get_service().approve_post(self.get_caller(), pk)
        return api_response(PostSerializer(post).data)

    @extend_schema(request=None, responses=PostSerializer)
    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):
        """Reject a pending post (ADMIN only)."""
        post = self.get_service().reject_post(self.get_caller(), pk)
        return api_response(PostSerializer(post).data)


class PublicPostListView(WorkflowServiceMixin, BaseAPIView):
    permission_classes: list[Any] = [AllowAny]

    @extend_schema(auth=[], parameters=[PostListQuerySerializer], responses=PublicPostListSerializer(many=True))
    def get(self, request):
        """Published posts for the public blog; ``status`` filters are ignored."""
        query = PostListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        service = self.get_service()
        page = service.page_request(params.get("page"), params.get("limit"))
        result = service.list_public_posts(params.get("search"), page)
        return api_response(page_payload(result, PublicPostListSerializer))


class PublicPostDetailView(WorkflowServiceMixin, BaseAPIView):
    permission_classes: list[Any] = [AllowAny]

    @extend_schema(auth=[], responses=PublicPostDetailSerializer)
    def get(self, request, slug):
        post = self.get_service().get_public_post(slug)
        return api_response(PublicPostDetailSerializer(post).data)


class RecentPostsView(WorkflowServiceMixin, BaseAPIView):
    permission_classes: list[Any] = [AllowAny]

    @extend_schema(auth=[], responses=RecentPostSerializer(many=True))
    def get(self, request, limit=None):
        posts = self.get_service().recent_public_posts(limit)
        return api_response({"posts": RecentPostSerializer(posts, many=True).data})


__all__ = ["PostViewSet", "PublicPostDetailView", "PublicPostListView", "RecentPostsView"]
