# items/management/commands/refresh_lot_status.py

"""
Re-derive Lot.status for lots that still hold stock.

Stored status is a convenience for filtering; it goes stale as calendar
days pass (an ACTIVE lot becomes EXPIRED at midnight without any write).
Reports and the stock view compare against today's date directly, so this
command only keeps the stored column honest. Safe to run from cron.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from items.models import Lot


class Command(BaseCommand):
    help = "Flip ACTIVE lots past their expiry date to EXPIRED (and back, if an expiry was corrected)."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Report counts without writing")

    def handle(self, *args, **options):
        today = timezone.localdate()
        dry_run = options["dry_run"]

        stale_expired = Lot.objects.filter(
            current_quantity__gt=0,
            status=Lot.Status.ACTIVE,
            expiry_date__lt=today,
        )
        stale_active = Lot.objects.filter(
            current_quantity__gt=0,
            status=Lot.Status.EXPIRED,
        ).exclude(expiry_date__lt=today)

        to_expire = stale_expired.count()
        to_activate = stale_active.count()

        if not dry_run:
            with transaction.atomic():
                stale_expired.update(status=Lot.Status.EXPIRED)
                stale_active.update(status=Lot.Status.ACTIVE)

        prefix = "[dry-run] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix}Expired: {to_expire} lot(s); reactivated: {to_activate} lot(s)."
            )
        )
