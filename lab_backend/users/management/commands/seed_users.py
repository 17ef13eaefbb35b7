# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_LOGISTICS,
    ROLE_OBSERVER,
    ROLE_PROCUREMENT,
)


@dataclass(frozen=True)
class SeedUser:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""
    department: str = ""


SEED_USERS = [
    SeedUser("Admin", ROLE_ADMIN, "admin@lab.local", "System", "Admin"),
    SeedUser("Procurement", ROLE_PROCUREMENT, "procurement@lab.local", "Purchase", "Officer"),
    SeedUser(
        "Logistics", ROLE_LOGISTICS, "logistics@lab.local", "Stock", "Keeper", "Biochemistry"
    ),
    SeedUser("Observer", ROLE_OBSERVER, "observer@lab.local", "Quality", "Auditor"),
]


class Command(BaseCommand):
    help = "Seed one user per lab role (idempotent; resets passwords)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="ChangeMe123!", help="Password for every seeded user")

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()
        password = options["password"]

        for seed in SEED_USERS:
            user, created = User.objects.get_or_create(
                email=seed.email,
                defaults={
                    "role": seed.role,
                    "first_name": seed.first_name,
                    "last_name": seed.last_name,
                    "department": seed.department,
                    "is_staff": seed.role == ROLE_ADMIN,
                    "is_superuser": seed.role == ROLE_ADMIN,
                },
            )
            if not created and user.role != seed.role:
                user.role = seed.role
            user.set_password(password)
            user.save()

            verb = "Created" if created else "Updated"
            self.stdout.write(self.style.SUCCESS(f"{verb} {seed.label}: {seed.email}"))
