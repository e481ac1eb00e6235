# circle/notifications/management/commands/purge_notifications.py
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from circle.events import get_sink


class Command(BaseCommand):
    help = "Delete notifications older than N days (cron: daily at midnight)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=getattr(settings, "NOTIFICATION_RETENTION_DAYS", 7),
            help="retention window in days",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days < 0:
            self.stderr.write(self.style.ERROR("--days must be >= 0"))
            return

        cutoff = timezone.now() - timedelta(days=days)
        deleted = get_sink().delete_older_than(cutoff)
        self.stdout.write(
            self.style.SUCCESS(f"✅ old notifications deleted (deleted={deleted})")
        )
