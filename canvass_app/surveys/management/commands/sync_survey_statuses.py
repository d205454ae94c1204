#!/usr/bin/env python3
"""
Django management command to sync survey statuses with the calendar.

This command should be run daily (e.g., via cron or a scheduled job) to:
1. Activate draft surveys whose date window has opened
2. Complete draft or active surveys whose end date has passed

Only surveys that have dispatched at least one invitation are touched.

Usage:
    python manage.py sync_survey_statuses
    python manage.py sync_survey_statuses --date 2026-03-01
    python manage.py sync_survey_statuses --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from canvass_app.surveys.services.status_sync_service import StatusSyncService


def _parse_date(value):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CommandError(f"Invalid --date '{value}', expected YYYY-MM-DD")


class Command(BaseCommand):
    help = "Sync survey statuses based on publish state and survey dates"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            help="Sync as of this date (YYYY-MM-DD) instead of today",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be done without actually doing it",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        today = _parse_date(options["date"]) if options["date"] else timezone.localdate()

        self.stdout.write(
            self.style.SUCCESS(f"Starting survey status sync for {today}")
        )

        if dry_run:
            self.stdout.write(
                self.style.WARNING("DRY RUN MODE - No changes will be made")
            )
            activated = StatusSyncService.activation_queryset(today).count()
            completed = StatusSyncService.completion_queryset(today).count()
            self.stdout.write(f"Would activate: {activated} surveys")
            self.stdout.write(f"Would complete: {completed} surveys")
            return

        try:
            stats = StatusSyncService.sync(today)
        except Exception as e:
            self.stderr.write(self.style.ERROR(f"Error syncing survey statuses: {e}"))
            raise

        self.stdout.write(self.style.SUCCESS(f"Surveys activated: {stats['activated']}"))
        self.stdout.write(self.style.SUCCESS(f"Surveys completed: {stats['completed']}"))
