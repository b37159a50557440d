from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from django_solana_mint.api.helpers import submission_error_to_view_exception
from django_solana_mint.api.serializers import (
    MintStoreItemSerializer,
    SolanaSubmissionSerializer,
    StoreItemSerializer,
)
from django_solana_mint.exceptions import SubmissionError
from django_solana_mint.models import StoreItem
from django_solana_mint.services.mint_service import MintService


class StoreItemViewSet(ReadOnlyModelViewSet):
    queryset = StoreItem.objects.filter(is_active=True).order_by("id")
    serializer_class = StoreItemSerializer
    permission_classes = [AllowAny]

    @action(detail=True, methods=["post"], serializer_class=MintStoreItemSerializer)
    def mint(self, request, *args, **kwargs):
        store_item = self.get_object()

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            submission = MintService().mint_store_item(
                store_item,
                owner_address=serializer.validated_data.get("owner_address") or None,
            )
        except SubmissionError as exc:
            raise submission_error_to_view_exception(exc)

        return Response(
            SolanaSubmissionSerializer(submission).data,
            status=status.HTTP_201_CREATED,
        )
