from django.urls import path
from rest_framework import routers

from locations.views import LocationSearchView, PincodeLookupView, ServiceAreaViewSet

router = routers.DefaultRouter()
router.register(r"service-areas", ServiceAreaViewSet)

urlpatterns = router.urls
urlpatterns += [
    path("search/", LocationSearchView.as_view(), name="search"),
    path("pincode/", PincodeLookupView.as_view(), name="pincode"),
]
