from django.urls import path

from .views import (
    ConversationView,
    MessageDetailView,
    MessageListView,
    SendMessageView,
)

urlpatterns = [
    path("send-message", SendMessageView.as_view()),  # POST
    path("messages", MessageListView.as_view()),  # GET
    path("messages/<str:message_id>", MessageDetailView.as_view()),  # GET / PUT / DELETE
    path("user-messages", ConversationView.as_view()),  # GET ?user1=&user2=
]
