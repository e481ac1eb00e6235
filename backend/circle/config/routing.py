# circle/config/routing.py
import circle.realtime.routing

websocket_urlpatterns = [
    *circle.realtime.routing.websocket_urlpatterns,
]
