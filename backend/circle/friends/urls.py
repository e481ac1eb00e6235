# circle/friends/urls.py
from django.urls import path

from .views import (
    FriendAcceptView,
    FriendCancelView,
    FriendDeclineView,
    FriendListView,
    FriendRemoveView,
    FriendRequestView,
)

urlpatterns = [
    path("add-friend", FriendRequestView.as_view()),  # POST
    path("accept-friend-request", FriendAcceptView.as_view()),  # PUT
    path("friends/cancel", FriendCancelView.as_view()),  # POST
    path("friends/decline", FriendDeclineView.as_view()),  # POST
    path("remove-friend", FriendRemoveView.as_view()),  # DELETE
    path("friends/<str:user_id>", FriendListView.as_view()),  # GET
]
