from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRoleOrReadOnly, is_admin_role
from core.utils import is_pincode, normalize_pincode
from integrations.services import nominatim
from locations.models import City, ServiceArea
from locations.resolver import search_locations
from locations.services import match_city_by_name
from vendors.matching import pincode_tier


class CitySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = [
            "id",
            "name",
            "slug",
            "state",
            "is_active",
            "is_coming_soon",
        ]


class ServiceAreaSerializer(serializers.ModelSerializer):
    city_name = serializers.CharField(source="city.name", read_only=True)

    class Meta:
        model = ServiceArea
        fields = [
            "id",
            "name",
            "pincode",
            "city",
            "city_name",
            "state",
            "lat",
            "lng",
            "alternate_names",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate_pincode(self, value):
        value = normalize_pincode(value)
        if not is_pincode(value):
            raise serializers.ValidationError("Pincode must be 6 digits.")
        return value


class ServiceAreaViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = ServiceArea.objects.select_related("city").order_by("city__name", "name")
    serializer_class = ServiceAreaSerializer
    permission_classes = [IsAdminRoleOrReadOnly]

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params

        if not is_admin_role(self.request.user):
            qs = qs.filter(is_active=True)
        elif params.get("is_active") is not None:
            qs = qs.filter(is_active=params["is_active"].lower() == "true")

        if params.get("city_id"):
            qs = qs.filter(city_id=params["city_id"])
        if params.get("pincode"):
            qs = qs.filter(pincode=normalize_pincode(params["pincode"]))
        return qs

    def perform_update(self, serializer):
        try:
            serializer.save()
        except DjangoValidationError as exc:
            raise ValidationError({"detail": exc.messages})


class LocationSearchView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        query = request.query_params.get("q", "")
        limit = request.query_params.get("limit")
        try:
            limit = int(limit) if limit else None
        except ValueError:
            raise ValidationError({"limit": "Must be an integer."})
        if limit is not None and limit < 1:
            raise ValidationError({"limit": "Must be at least 1."})

        return Response({"results": search_locations(query, limit=limit)}, status=status.HTTP_200_OK)


class PincodeLookupView(APIView):
    """
    Pincode details from local data, falling back to the geocoder. A geocoded
    pincode inside a known city is stored as an inactive ServiceArea awaiting
    review.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        pincode = normalize_pincode(request.query_params.get("pincode"))
        if not is_pincode(pincode):
            raise ValidationError({"pincode": "Pincode must be 6 digits."})

        area = ServiceArea.objects.select_related("city").filter(pincode=pincode, is_active=True).order_by("name").first()
        if area:
            return Response(
                {
                    "pincode": pincode,
                    "source": "service_area",
                    "area": ServiceAreaSerializer(area).data,
                    "city": CitySummarySerializer(area.city).data,
                    "vendor_count": len(pincode_tier(pincode)),
                    "pending_review": False,
                },
                status=status.HTTP_200_OK,
            )

        place = nominatim.geocode_pincode(pincode)
        if not place:
            raise NotFound("Pincode not found.")

        city = match_city_by_name(place["city_name"])
        pending_review = False
        if city:
            # inactive rows for this pincode are already awaiting review
            if not ServiceArea.objects.filter(pincode=pincode).exists():
                ServiceArea.objects.create(
                    pincode=pincode,
                    name=place["name"] or pincode,
                    city=city,
                    state=place["state"] or city.state,
                    lat=place["lat"],
                    lng=place["lng"],
                    is_active=False,
                )
            pending_review = True

        return Response(
            {
                "pincode": pincode,
                "source": "geocoder",
                "area": None,
                "place": place,
                "city": CitySummarySerializer(city).data if city else None,
                "vendor_count": 0,
                "pending_review": pending_review,
            },
            status=status.HTTP_200_OK,
        )
