from django.urls import path

from .views import NotificationDetailView, NotificationSeenView, UserNotificationListView

urlpatterns = [
    path("user-notifications", UserNotificationListView.as_view()),  # GET
    path("notifications/<str:notification_id>/seen", NotificationSeenView.as_view()),  # PUT
    path("notifications/<str:notification_id>", NotificationDetailView.as_view()),  # DELETE
]
