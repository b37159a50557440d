from decimal import Decimal

from django.core.management import BaseCommand, CommandError

from django_solana_mint.choices import SubmissionStatusTypes
from django_solana_mint.exceptions import SubmissionError
from django_solana_mint.services.transfer_service import TransferService


class Command(BaseCommand):
    help = "Transfers SOL from the configured wallet and waits for confirmation."

    def add_arguments(self, parser):
        parser.add_argument("recipient", type=str, help="Recipient wallet address.")
        parser.add_argument("amount", type=Decimal, help="Amount in SOL.")

    def handle(self, *args, **options):
        recipient = options["recipient"]
        amount = options["amount"]
        self.stdout.write(f"Sending {amount} SOL to {recipient}...")

        try:
            submission = TransferService().send_sol(recipient, amount)
        except SubmissionError as exc:
            raise CommandError(str(exc))

        message = (
            f"Transfer {submission.id} finished with status={submission.status}, "
            f"signature={submission.signature}"
        )
        if submission.status == SubmissionStatusTypes.CONFIRMED:
            self.stdout.write(self.style.SUCCESS(message))
        else:
            self.stdout.write(self.style.WARNING(f"{message}, reason={submission.reason}"))
