from rest_framework import serializers, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.utils import is_pincode, normalize_pincode
from delivery.serviceability import check_serviceability
from delivery.slots import resolve_slots
from locations.models import City


class ServiceabilityRequestSerializer(serializers.Serializer):
    pincode = serializers.CharField(max_length=12, required=False, allow_blank=True, default="")
    lat = serializers.FloatField(required=False, allow_null=True, default=None, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, allow_null=True, default=None, min_value=-180, max_value=180)
    product_id = serializers.IntegerField(required=False, allow_null=True, default=None, min_value=1)

    def validate_pincode(self, value):
        if not value:
            return ""
        value = normalize_pincode(value)
        if not is_pincode(value):
            raise serializers.ValidationError("Pincode must be 6 digits.")
        return value

    def validate(self, attrs):
        has_point = attrs["lat"] is not None and attrs["lng"] is not None
        if (attrs["lat"] is None) != (attrs["lng"] is None):
            raise serializers.ValidationError("Both lat and lng are required when sending coordinates.")
        if not attrs["pincode"] and not has_point:
            raise serializers.ValidationError("Provide a pincode or both lat and lng.")
        return attrs


class ServiceabilityView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ServiceabilityRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = check_serviceability(
            pincode=data["pincode"] or None,
            lat=data["lat"],
            lng=data["lng"],
            product_id=data["product_id"],
        )
        return Response(result, status=status.HTTP_200_OK)


class CitySlotsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        city_id = request.query_params.get("city_id")
        if not city_id:
            raise ValidationError({"city_id": "This query parameter is required."})
        if not str(city_id).isdigit():
            raise ValidationError({"city_id": "Must be an integer."})
        city = City.objects.filter(pk=city_id).first()
        if city is None:
            raise NotFound("City not found.")
        return Response(
            {"city_id": city.id, "city_name": city.name, "slots": resolve_slots(city.id)}, status=status.HTTP_200_OK
        )
