from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    path("api/locations/", include(("locations.urls", "locations"), namespace="locations")),
    path("api/delivery/", include(("delivery.urls", "delivery"), namespace="delivery")),
    path("api/vendors/", include(("vendors.urls", "vendors"), namespace="vendors")),
]
