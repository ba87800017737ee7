"""Serializers for post payloads.

Output keys are camelCase (``coverImage``, ``authorId``, ``publishedAt``...)
because those names are the wire contract published to API clients. Input
serializers only check shapes; the workflow service applies business rules.
"""

from rest_framework import serializers

from .models import Post
from .state_machine import PostStatus


class AuthorSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)


class ApproverSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)


class PostSerializer(serializers.ModelSerializer):
    """Full post representation for authenticated endpoints."""

    coverImage = serializers.CharField(source="cover_image", read_only=True)
    authorId = serializers.UUIDField(source="author_id", read_only=True)
    approvedBy = serializers.UUIDField(source="approved_by_id", read_only=True, allow_null=True)
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    author = AuthorSerializer(read_only=True)
    approver = ApproverSerializer(source="approved_by", read_only=True, allow_null=True)

    class Meta:
        model = Post
        fields = [
            "id",
            "title",
            "content",
            "excerpt",
            "coverImage",
            "slug",
            "status",
            "authorId",
            "approvedBy",
            "publishedAt",
            "createdAt",
            "updatedAt",
            "author",
            "approver",
        ]
        read_only_fields = fields


class PublicAuthorSerializer(serializers.Serializer):
    name = serializers.CharField(read_only=True)


class PublicPostListSerializer(serializers.ModelSerializer):
    """Teaser fields for the public blog index."""

    coverImage = serializers.CharField(source="cover_image", read_only=True)
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    author = PublicAuthorSerializer(read_only=True)

    class Meta:
        model = Post
        fields = ["id", "title", "excerpt", "coverImage", "slug", "publishedAt", "createdAt", "author"]
        read_only_fields = fields


class PublicPostDetailSerializer(serializers.ModelSerializer):
    coverImage = serializers.CharField(source="cover_image", read_only=True)
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    author = PublicAuthorSerializer(read_only=True)

    class Meta:
        model = Post
        fields = ["id", "title", "content", "excerpt", "coverImage", "slug", "publishedAt", "createdAt", "author"]
        read_only_fields = fields


class RecentPostSerializer(serializers.ModelSerializer):
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)

    class Meta:
        model = Post
        fields = ["id", "title", "slug", "publishedAt"]
        read_only_fields = fields


class PostCreateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    content = serializers.CharField(required=False, allow_blank=True)
    excerpt = serializers.CharField(required=False, allow_blank=True)
    coverImage = serializers.CharField(required=False, allow_blank=True, max_length=500)
    draft = serializers.BooleanField(required=False, default=False)

    def to_service_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "title": data.get("title", ""),
            "content": data.get("content", ""),
            "excerpt": data.get("excerpt"),
            "cover_image": data.get("coverImage"),
            "draft": data.get("draft", False),
        }


class PostUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    content = serializers.CharField(required=False, allow_blank=True)
    excerpt = serializers.CharField(required=False, allow_blank=True)
    coverImage = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def to_service_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "title": data.get("title"),
            "content": data.get("content"),
            "excerpt": data.get("excerpt"),
            "cover_image": data.get("coverImage"),
        }


class PostListQuerySerializer(serializers.Serializer):
    """Query-string filters and pagination for listings."""

    status = serializers.ChoiceField(choices=PostStatus.choices, required=False)
    authorId = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1)


def page_payload(page, serializer_class) -> dict:
    """Listing body: the serialized page plus pagination metadata."""
    return {
        "posts": serializer_class(page.items, many=True).data,
        "pagination": {
            "total": page.total,
            "page": page.page,
            "limit": page.limit,
            "totalPages": page.total_pages,
        },
    }


__all__ = [
    "PostCreateSerializer",
    "PostListQuerySerializer",
    "PostSerializer",
    "PostUpdateSerializer",
    "PublicPostDetailSerializer",
    "PublicPostListSerializer",
    "RecentPostSerializer",
    "page_payload",
]
