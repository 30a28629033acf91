from django.core.management.base import BaseCommand
from django.utils import timezone

from matching.conf import matching_settings
from matching.exceptions import InvalidRecord
from matching.models import OPEN_STATUSES, Match
from matching.records import DonorRecord, RecipientRecord
from matching.store import ProfileStore
from matching.utils.scoring import ScoringContext, score


class Command(BaseCommand):
    help = "Recompute the score of every open match with the current weights."

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help="Report changes without saving them.")

    def handle(self, *args, **options):
        config = matching_settings()
        store = ProfileStore(config)
        now = timezone.now()
        oldest = {}
        updated = 0

        matches = Match.objects.filter(status__in=OPEN_STATUSES).select_related('donor', 'recipient')
        for match in matches:
            try:
                donor = DonorRecord.from_model(match.donor)
                recipient = RecipientRecord.from_model(match.recipient)
            except InvalidRecord as e:
                self.stderr.write(f"Match {match.pk}: skipped, {e.message}")
                continue

            if match.organ_type not in oldest:
                oldest[match.organ_type] = store.oldest_waiting_request_at(match.organ_type)
            context = ScoringContext(now=now, oldest_request_at=oldest[match.organ_type])
            new_score = score(donor, recipient, context, config)

            if new_score == match.score:
                continue
            self.stdout.write(f"Match {match.pk}: {match.score} -> {new_score}")
            if not options['dry_run']:
                match.score = new_score
                match.save(update_fields=['score', 'updated_at'])
            updated += 1

        verb = "would be updated" if options['dry_run'] else "updated"
        self.stdout.write(self.style.SUCCESS(f"{updated} match score(s) {verb}."))
