from django.urls import path
from rest_framework.routers import SimpleRouter

from django_solana_mint.api.views.store_item import StoreItemViewSet
from django_solana_mint.api.views.submission import SolanaSubmissionViewSet
from django_solana_mint.api.views.transfer_sol import RewardView, TransferSolView
from django_solana_mint.api.views.wallet import WalletBalanceView

router = SimpleRouter()
router.register("store-items", StoreItemViewSet)
router.register("submissions", SolanaSubmissionViewSet)

urlpatterns = [
    path("transfers/", TransferSolView.as_view()),
    path("rewards/", RewardView.as_view()),
    path("wallet/", WalletBalanceView.as_view()),
]

urlpatterns += router.urls
