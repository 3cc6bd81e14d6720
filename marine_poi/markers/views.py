"""
DRF views for the markers app.
"""

from django.db.models import QuerySet
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from .models import Marker, Review, to_db_id
from .serializers import MARKER_TYPE_NAMES, MarkerSerializer, ReviewSerializer
from .services.fields import as_flexible_uint64
from .services.lookups import MARKER_TYPES, lookup_text


class MarkerViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Marker providing list and retrieve operations.

    Supports filtering by:
    - type: Wire type name (?type=Marina)
    - name: Partial, case-insensitive name match (?name=harbor)
    - min_last_updated: Epoch seconds (?min_last_updated=1527067801)
    """

    serializer_class = MarkerSerializer

    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "last_updated", "marker_id"]
    ordering = ["name"]

    def get_queryset(self) -> QuerySet[Marker]:
        queryset = Marker.objects.select_related("meta").prefetch_related(
            "sections", "business_photos", "competitors"
        )
        return self._apply_filters(queryset)

    def get_object(self) -> Marker:
        # URLs carry the unsigned service id
        marker_id = as_flexible_uint64(self.kwargs.get("pk"))
        if marker_id is not None:
            self.kwargs["pk"] = to_db_id(marker_id)
        return super().get_object()

    def _apply_filters(self, queryset: QuerySet[Marker]) -> QuerySet[Marker]:
        params = self.request.query_params

        type_param = params.get("type")
        if type_param:
            lookup = lookup_text(MARKER_TYPES, type_param)
            if lookup.known:
                queryset = queryset.filter(marker_type=int(lookup.value))
            else:
                queryset = queryset.none()

        name_param = params.get("name")
        if name_param:
            queryset = queryset.filter(name__icontains=name_param)

        min_last_updated = params.get("min_last_updated")
        if min_last_updated:
            try:
                queryset = queryset.filter(last_updated__gte=int(min_last_updated))
            except (ValueError, TypeError):
                pass  # Ignore invalid timestamps

        return queryset

    @action(detail=False, methods=["get"])
    def types(self, request: Request) -> Response:
        """
        Get the marker types present, with counts.
        """
        from django.db.models import Count

        counts = (
            Marker.objects.values("marker_type")
            .annotate(count=Count("marker_id"))
            .order_by("marker_type")
        )

        types = [
            {
                "type": MARKER_TYPE_NAMES.get(row["marker_type"], "Unknown"),
                "count": row["count"],
            }
            for row in counts
        ]
        return Response({"types": types, "count": len(types)})


class ReviewViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Review.

    Supports filtering by:
    - marker_id: Marker service id (?marker_id=18446744073709551615)
    """

    serializer_class = ReviewSerializer

    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["last_updated", "rating", "votes"]
    ordering = ["-last_updated"]

    def get_queryset(self) -> QuerySet[Review]:
        queryset = Review.objects.prefetch_related("photos")

        marker_param = self.request.query_params.get("marker_id")
        if marker_param:
            marker_id = as_flexible_uint64(marker_param)
            if marker_id is None:
                return queryset.none()
            queryset = queryset.filter(marker_id=to_db_id(marker_id))

        return queryset

    def get_object(self) -> Review:
        review_id = as_flexible_uint64(self.kwargs.get("pk"))
        if review_id is not None:
            self.kwargs["pk"] = to_db_id(review_id)
        return super().get_object()
