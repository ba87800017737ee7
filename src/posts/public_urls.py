"""Routing for the unauthenticated blog surface (PUBLISHED posts only)."""

from django.urls import path

from .views import PublicPostDetailView, PublicPostListView, RecentPostsView

urlpatterns = [
    path("posts/", PublicPostListView.as_view(), name="public-post-list"),
    path("posts/recent/<int:limit>/", RecentPostsView.as_view(), name="public-post-recent"),
    path("posts/recent/", RecentPostsView.as_view(), name="public-post-recent-default"),
    path("posts/<slug:slug>/", PublicPostDetailView.as_view(), name="public-post-detail"),
]
