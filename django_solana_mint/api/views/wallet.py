from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from django_solana_mint.api.serializers import WalletBalanceSerializer
from django_solana_mint.exceptions import ViewException, WalletBalanceUnavailableError
from django_solana_mint.services.wallet_service import WalletService


class WalletBalanceView(generics.GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = WalletBalanceSerializer

    def get(self, request, *args, **kwargs):
        try:
            wallet_balance = WalletService().get_balance()
        except WalletBalanceUnavailableError as exc:
            raise ViewException(
                error_message={"code": exc.code, "detail": str(exc)},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response(self.get_serializer(wallet_balance).data)
