from django.urls import path

from delivery.views import CitySlotsView, ServiceabilityView

urlpatterns = [
    path("serviceability/", ServiceabilityView.as_view(), name="serviceability"),
    path("city-slots/", CitySlotsView.as_view(), name="city-slots"),
]
