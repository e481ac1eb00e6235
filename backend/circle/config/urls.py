# circle/config/urls.py
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("circle.authentication.urls")),
    path("api/v1/", include("circle.users.urls")),
    path("api/v1/", include("circle.friends.urls")),
    path("api/v1/", include("circle.chat.urls")),
    path("api/v1/", include("circle.notifications.urls")),
]
