from django.core.management import BaseCommand

from django_solana_mint.services.submission_refresh_service import (
    SubmissionRefreshService,
)


class Command(BaseCommand):
    help = (
        "Re-query the signatures of TIMED_OUT submissions and store confirmations "
        "or failures that landed after the polling window."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=100,
            help="Maximum number of latest timed out submissions to scan.",
        )
        parser.add_argument(
            "--sleep",
            type=float,
            default=0,
            help="Sleep interval in seconds between refreshes to prevent rate limiting.",
        )

    def handle(self, *args, **options):
        summary = SubmissionRefreshService().refresh_timed_out_submissions(
            limit=options["limit"],
            sleep_interval_seconds=options["sleep"],
        )

        self.stdout.write(
            self.style.SUCCESS(
                "Refresh completed: "
                f"scanned={summary['scanned']}, "
                f"confirmed={summary['confirmed']}, "
                f"failed={summary['failed']}, "
                f"timed_out={summary['timed_out']}, "
                f"errors={summary['errors']}"
            )
        )
