from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from django_solana_mint.api.helpers import submission_error_to_view_exception
from django_solana_mint.api.serializers import (
    RewardSerializer,
    SolanaSubmissionSerializer,
    TransferSolSerializer,
)
from django_solana_mint.exceptions import SubmissionError
from django_solana_mint.services.transfer_service import TransferService


class TransferSolView(generics.CreateAPIView):
    permission_classes = [AllowAny]
    serializer_class = TransferSolSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            submission = TransferService().send_sol(
                recipient_address=serializer.validated_data["recipient_address"],
                amount=serializer.validated_data["amount"],
                meta_data=serializer.validated_data.get("meta_data"),
            )
        except SubmissionError as exc:
            raise submission_error_to_view_exception(exc)

        return Response(
            SolanaSubmissionSerializer(submission).data,
            status=status.HTTP_201_CREATED,
        )


class RewardView(generics.CreateAPIView):
    permission_classes = [AllowAny]
    serializer_class = RewardSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            submission = TransferService().send_reward(
                recipient_address=serializer.validated_data["recipient_address"],
            )
        except SubmissionError as exc:
            raise submission_error_to_view_exception(exc)

        return Response(
            SolanaSubmissionSerializer(submission).data,
            status=status.HTTP_201_CREATED,
        )
