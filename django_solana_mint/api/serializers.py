from decimal import Decimal

from rest_framework import serializers

from django_solana_mint.models import SolanaSubmission, StoreItem


class StoreItemSerializer(serializers.ModelSerializer):
    metadata_uri = serializers.CharField(source="full_metadata_uri", read_only=True)
    symbol = serializers.CharField(source="nft_symbol", read_only=True)

    class Meta:
        model = StoreItem
        fields = ["id", "name", "symbol", "description", "price_in_sol", "metadata_uri"]


class WalletBalanceSerializer(serializers.Serializer):
    wallet_address = serializers.CharField(read_only=True)
    short_address = serializers.CharField(read_only=True)
    balance_lamports = serializers.IntegerField(read_only=True)
    balance_sol = serializers.DecimalField(
        max_digits=30, decimal_places=9, read_only=True
    )


class SolanaSubmissionSerializer(serializers.ModelSerializer):
    amount_sol = serializers.DecimalField(
        max_digits=30, decimal_places=9, read_only=True
    )
    explorer_url = serializers.CharField(read_only=True)

    class Meta:
        model = SolanaSubmission
        fields = [
            "id",
            "kind",
            "status",
            "payer_address",
            "recipient_address",
            "amount_lamports",
            "amount_sol",
            "store_item",
            "mint_address",
            "signature",
            "signer_tier",
            "reason",
            "explorer_url",
            "created",
            "updated",
        ]
        read_only_fields = fields


class TransferSolSerializer(serializers.Serializer):
    recipient_address = serializers.CharField(max_length=60)
    amount = serializers.DecimalField(
        max_digits=30, decimal_places=9, min_value=Decimal("0.000000001")
    )
    meta_data = serializers.JSONField(required=False, default=dict)


class RewardSerializer(serializers.Serializer):
    recipient_address = serializers.CharField(max_length=60)


class MintStoreItemSerializer(serializers.Serializer):
    owner_address = serializers.CharField(
        max_length=60, required=False, allow_null=True, allow_blank=True
    )
