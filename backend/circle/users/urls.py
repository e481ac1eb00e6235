# circle/users/urls.py
from django.urls import path

from .views import ProfileView, UserListView, UserSearchView, UserUpdateView

urlpatterns = [
    path("profile/<str:user_id>", ProfileView.as_view()),  # GET
    path("users", UserListView.as_view()),  # GET
    path("search", UserSearchView.as_view()),  # GET ?query=
    path("update/<str:user_id>", UserUpdateView.as_view()),  # PUT
]
