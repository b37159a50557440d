from django.core.management import BaseCommand, CommandError

from django_solana_mint.choices import SubmissionStatusTypes
from django_solana_mint.exceptions import SubmissionError
from django_solana_mint.models import StoreItem
from django_solana_mint.services.mint_service import MintService


class Command(BaseCommand):
    help = "Mints an NFT for a store item and waits for confirmation."

    def add_arguments(self, parser):
        parser.add_argument("store_item_id", type=int)
        parser.add_argument(
            "--owner",
            type=str,
            default=None,
            help="Wallet address that receives the NFT. Defaults to the configured wallet.",
        )

    def handle(self, *args, **options):
        store_item = StoreItem.objects.filter(id=options["store_item_id"]).first()
        if not store_item:
            raise CommandError(f"Store item {options['store_item_id']} does not exist")

        self.stdout.write(f"Minting '{store_item.name}'...")
        try:
            submission = MintService().mint_store_item(
                store_item, owner_address=options["owner"]
            )
        except SubmissionError as exc:
            raise CommandError(str(exc))

        if submission.status == SubmissionStatusTypes.CONFIRMED:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Mint complete: {submission.mint_address} ({submission.explorer_url})"
                )
            )
        else:
            self.stdout.write(
                self.style.WARNING(
                    f"Mint {submission.id} finished with status={submission.status}, "
                    f"reason={submission.reason}, explorer={submission.explorer_url}"
                )
            )
