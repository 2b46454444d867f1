from django.urls import path

from vendors.views import (
    BulkActivateView,
    CoveragePreviewView,
    CreateByPincodeView,
    MyAvailableAreasView,
    MyCoverageView,
    MyCreateAreaView,
    VendorCoverageAdminView,
    VendorPincodesReplaceView,
)

urlpatterns = [
    path("me/coverage/", MyCoverageView.as_view(), name="my-coverage"),
    path("me/coverage/available/", MyAvailableAreasView.as_view(), name="my-coverage-available"),
    path("me/coverage/create-area/", MyCreateAreaView.as_view(), name="my-coverage-create-area"),
    path("<int:vendor_id>/coverage/", VendorCoverageAdminView.as_view(), name="coverage"),
    path(
        "<int:vendor_id>/coverage/create-by-pincode/",
        CreateByPincodeView.as_view(),
        name="coverage-create-by-pincode",
    ),
    path("<int:vendor_id>/coverage/bulk-activate/", BulkActivateView.as_view(), name="coverage-bulk-activate"),
    path("<int:vendor_id>/coverage/pincodes/", VendorPincodesReplaceView.as_view(), name="coverage-pincodes"),
    path("<int:vendor_id>/coverage/preview/", CoveragePreviewView.as_view(), name="coverage-preview"),
]
