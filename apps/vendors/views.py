from decimal import Decimal

from django.conf import settings
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from core.utils import is_pincode, normalize_pincode
from locations.views import ServiceAreaSerializer
from vendors import coverage
from vendors.models import Vendor, VendorServiceArea
from vendors.permissions import IsAdminRoleOrOwningVendorReadOnly, IsVendorStaff


class VendorSummarySerializer(serializers.ModelSerializer):
    city_name = serializers.CharField(source="city.name", read_only=True)

    class Meta:
        model = Vendor
        fields = [
            "id",
            "name",
            "slug",
            "status",
            "is_online",
            "city",
            "city_name",
            "lat",
            "lng",
            "delivery_radius_km",
            "coverage_method",
            "coverage_radius_km",
        ]
        read_only_fields = fields


class CoverageSerializer(serializers.ModelSerializer):
    area_name = serializers.CharField(source="service_area.name", read_only=True)
    pincode = serializers.CharField(source="service_area.pincode", read_only=True)
    city_id = serializers.IntegerField(source="service_area.city_id", read_only=True)
    city_name = serializers.CharField(source="service_area.city.name", read_only=True)

    class Meta:
        model = VendorServiceArea
        fields = [
            "id",
            "service_area",
            "area_name",
            "pincode",
            "city_id",
            "city_name",
            "delivery_surcharge",
            "status",
            "is_active",
            "requested_at",
            "activated_at",
            "activated_by",
            "reviewed_at",
            "rejection_reason",
        ]
        read_only_fields = fields


def _validated_pincode(value):
    value = normalize_pincode(value)
    if not is_pincode(value):
        raise serializers.ValidationError("Pincode must be 6 digits.")
    return value


class SurchargeField(serializers.DecimalField):
    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 10)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("min_value", Decimal("0"))
        super().__init__(**kwargs)


class SelectionItemSerializer(serializers.Serializer):
    service_area_id = serializers.IntegerField(min_value=1)
    delivery_surcharge = SurchargeField(required=False, default=Decimal("0"))


class VendorSelectionSerializer(serializers.Serializer):
    selections = SelectionItemSerializer(many=True, allow_empty=True)


class CreateAreaSerializer(serializers.Serializer):
    pincode = serializers.CharField(max_length=12)
    area_name = serializers.CharField(max_length=160, required=False, allow_blank=True, default="")
    delivery_surcharge = SurchargeField(required=False, default=Decimal("0"))

    def validate_pincode(self, value):
        return _validated_pincode(value)


class BulkAddSerializer(serializers.Serializer):
    service_area_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
    delivery_surcharge = SurchargeField(required=False, default=Decimal("0"))


class TransitionSerializer(serializers.Serializer):
    coverage_id = serializers.IntegerField(min_value=1)
    action = serializers.ChoiceField(choices=list(coverage.TRANSITIONS))
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PincodeChargeSerializer(serializers.Serializer):
    pincode = serializers.CharField(max_length=12)
    delivery_charge = SurchargeField(required=False, default=Decimal("0"))

    def validate_pincode(self, value):
        return _validated_pincode(value)


class PincodeReplaceSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=[coverage.MODE_PINCODES, coverage.MODE_RADIUS])
    pincodes = PincodeChargeSerializer(many=True, required=False)
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    radius_km = serializers.FloatField(required=False, min_value=0.1)
    delivery_charge = SurchargeField(required=False, default=Decimal("0"))

    def validate(self, attrs):
        if attrs["mode"] == coverage.MODE_RADIUS:
            missing = [name for name in ("lat", "lng", "radius_km") if attrs.get(name) is None]
            if missing:
                raise serializers.ValidationError({name: "Required in radius mode." for name in missing})
        elif "pincodes" not in attrs:
            raise serializers.ValidationError({"pincodes": "Required in pincodes mode."})
        return attrs


def _get_vendor(vendor_id) -> Vendor:
    vendor = Vendor.objects.select_related("city").filter(pk=vendor_id).first()
    if vendor is None:
        raise NotFound("Vendor not found.")
    return vendor


def _coverage_payload(vendor, include_available=False):
    data = {
        "vendor": VendorSummarySerializer(vendor).data,
        "coverage": CoverageSerializer(coverage.coverage_queryset(vendor), many=True).data,
    }
    if include_available:
        data["available"] = ServiceAreaSerializer(coverage.available_service_areas(vendor), many=True).data
    return data


def _wants_available(request) -> bool:
    return str(request.query_params.get("include_available", "")).lower() in ("1", "true", "yes")


# -------------------------
# Vendor dashboard
# -------------------------

class VendorCoverageMixin:
    permission_classes = [IsAuthenticated, IsVendorStaff]

    def get_vendor(self):
        return self.request.vendor_staff.vendor


class MyCoverageView(VendorCoverageMixin, APIView):
    def get(self, request):
        return Response(_coverage_payload(self.get_vendor(), _wants_available(request)), status=status.HTTP_200_OK)

    def post(self, request):
        serializer = VendorSelectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vendor = self.get_vendor()
        rows = coverage.save_vendor_selection(vendor, serializer.validated_data["selections"])
        return Response({"coverage": CoverageSerializer(rows, many=True).data}, status=status.HTTP_200_OK)


class MyAvailableAreasView(VendorCoverageMixin, APIView):
    def get(self, request):
        areas = coverage.available_service_areas(self.get_vendor())
        return Response({"results": ServiceAreaSerializer(areas, many=True).data}, status=status.HTTP_200_OK)


class MyCreateAreaView(VendorCoverageMixin, APIView):
    def post(self, request):
        serializer = CreateAreaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        row, area, area_created = coverage.vendor_create_area(
            self.get_vendor(),
            data["pincode"],
            area_name=data["area_name"] or None,
            delivery_surcharge=data["delivery_surcharge"],
        )
        return Response(
            {
                "coverage": CoverageSerializer(row).data,
                "area": ServiceAreaSerializer(area).data,
                "area_created": area_created,
            },
            status=status.HTTP_201_CREATED,
        )


# -------------------------
# Admin
# -------------------------

class VendorCoverageAdminView(APIView):
    """
    GET: coverage rows of a vendor.
    POST: bulk-add existing areas as ACTIVE.
    PATCH: activate / reject / deactivate / reconsider one row.
    """

    permission_classes = [IsAuthenticated, IsAdminRoleOrOwningVendorReadOnly]

    def get(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        return Response(_coverage_payload(vendor, _wants_available(request)), status=status.HTTP_200_OK)

    def post(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        serializer = BulkAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = coverage.bulk_add_coverage(
            vendor,
            serializer.validated_data["service_area_ids"],
            serializer.validated_data["delivery_surcharge"],
            request.user,
        )
        return Response(result, status=status.HTTP_200_OK)

    def patch(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        row = coverage.transition_coverage(vendor, data["coverage_id"], data["action"], request.user, data["reason"])
        return Response(CoverageSerializer(row).data, status=status.HTTP_200_OK)


class CreateByPincodeView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        serializer = CreateAreaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        row, area, area_created = coverage.create_by_pincode(
            vendor,
            data["pincode"],
            request.user,
            area_name=data["area_name"] or None,
            delivery_surcharge=data["delivery_surcharge"],
        )
        return Response(
            {
                "count": 1,
                "coverage": CoverageSerializer(row).data,
                "area": ServiceAreaSerializer(area).data,
                "area_created": area_created,
            },
            status=status.HTTP_201_CREATED,
        )


class BulkActivateView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        count = coverage.bulk_activate(vendor, request.user)
        return Response({"count": count}, status=status.HTTP_200_OK)


class VendorPincodesReplaceView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        serializer = PincodeReplaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = coverage.replace_vendor_pincodes(
            vendor,
            request.user,
            data["mode"],
            pincodes=data.get("pincodes"),
            lat=data.get("lat"),
            lng=data.get("lng"),
            radius_km=data.get("radius_km"),
            delivery_charge=data["delivery_charge"],
        )
        return Response(result, status=status.HTTP_200_OK)


class CoveragePreviewView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, vendor_id):
        vendor = _get_vendor(vendor_id)
        params = request.query_params
        try:
            lat = float(params["lat"]) if params.get("lat") else vendor.lat
            lng = float(params["lng"]) if params.get("lng") else vendor.lng
            radius = float(params.get("radius") or getattr(settings, "COVERAGE_PREVIEW_DEFAULT_RADIUS_KM", 8))
        except ValueError:
            raise ValidationError({"detail": "lat, lng and radius must be numbers."})
        if lat is None or lng is None:
            raise ValidationError({"lat": "Coordinates are required when the vendor has none."})
        if radius <= 0:
            raise ValidationError({"radius": "Must be greater than zero."})
        return Response(coverage.preview_radius(lat, lng, radius), status=status.HTTP_200_OK)
