import json

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.core.management.base import BaseCommand, CommandError

from matching.batch import BatchCoordinator


class Command(BaseCommand):
    help = "Allocate donors to every verified recipient request. Safe to re-run."

    def add_arguments(self, parser):
        parser.add_argument(
            '--operator',
            required=True,
            help="Username of the staff member running the allocation (recorded in the audit log)."
        )

    def handle(self, *args, **options):
        User = get_user_model()
        try:
            operator = User.objects.get(username=options['operator'])
        except User.DoesNotExist:
            raise CommandError(f"Unknown operator '{options['operator']}'.")

        try:
            summary = BatchCoordinator().run_all(operator)
        except PermissionDenied as e:
            raise CommandError(str(e))

        self.stdout.write(json.dumps(summary.as_dict(), indent=2))
        self.stdout.write(self.style.SUCCESS(
            f"Created {summary.created} match(es) for {summary.total_eligible} verified recipient(s)."
        ))
