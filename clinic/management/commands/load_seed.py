# clinic/management/commands/load_seed.py
from django.core.management.base import BaseCommand

from clinic.models import Facility
from clinic.services.accounts import provision_seed_user, seed_record_is_valid
from clinic.services.seed import seed_facilities, seed_users


class Command(BaseCommand):
    help = "Insert seed users and facilities from the bundled JSON fixtures (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--users-only", action="store_true", help="Skip facilities.")

    def handle(self, *args, **opts):
        created = skipped = 0
        for record in seed_users():
            if not seed_record_is_valid(record):
                self.stdout.write(self.style.WARNING(f"skip: {record.get('email')} (invalid role or credentials)"))
                skipped += 1
                continue
            user, was_created = provision_seed_user(record)
            if was_created:
                created += 1
                self.stdout.write(self.style.SUCCESS(f"ok: {user.email} ({user.role})"))
            else:
                skipped += 1
        self.stdout.write(f"users: {created} created, {skipped} skipped")

        if opts["users_only"]:
            return
        created = skipped = 0
        for row in seed_facilities():
            if not row.get("code") or not row.get("name"):
                skipped += 1
                continue
            _, was_created = Facility.objects.get_or_create(
                code=row["code"],
                defaults={
                    "name": row["name"],
                    "facility_type": row.get("facilityType"),
                    "address": row.get("address"),
                    "phone": row.get("phone"),
                    "email": row.get("email"),
                    "district": row.get("district"),
                    "region": row.get("region"),
                    "description": row.get("description"),
                },
            )
            created += int(was_created)
            skipped += int(not was_created)
        self.stdout.write(self.style.SUCCESS(f"facilities: {created} created, {skipped} skipped"))
