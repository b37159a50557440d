from django.dispatch import Signal

# Sent once per submission after its terminal outcome is stored.
# Arguments: submission (SolanaSubmission), result (SubmissionResult)
submission_finished = Signal()
