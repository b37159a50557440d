from rest_framework.decorators import action
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from django_solana_mint.api.helpers import submission_error_to_view_exception
from django_solana_mint.api.serializers import SolanaSubmissionSerializer
from django_solana_mint.exceptions import SubmissionError
from django_solana_mint.models import SolanaSubmission
from django_solana_mint.services.submission_refresh_service import (
    SubmissionRefreshService,
)


class SolanaSubmissionViewSet(GenericViewSet, RetrieveModelMixin):
    pagination_class = None
    queryset = SolanaSubmission.objects.select_related("store_item").all()
    serializer_class = SolanaSubmissionSerializer
    permission_classes = [AllowAny]

    @action(detail=True, methods=["post"])
    def refresh(self, request, *args, **kwargs):
        submission = self.get_object()

        try:
            submission = SubmissionRefreshService().refresh_submission(submission)
        except SubmissionError as exc:
            raise submission_error_to_view_exception(exc)

        return Response(self.get_serializer(submission).data)
