from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token

from profiles.models import Profile

DEMO_USERS = {
    "admin": {"username": "storeadmin", "password": "admin-demo-123", "email": "admin@example.com", "is_staff": True},
    "buyer": {"username": "player1", "password": "player-demo-123", "email": "player1@example.com", "is_staff": False},
}


class Command(BaseCommand):
    help = "Create or update the demo admin and buyer accounts."

    def handle(self, *args, **options):
        User = get_user_model()

        for role, cfg in DEMO_USERS.items():
            u, created = User.objects.get_or_create(
                username=cfg["username"],
                defaults={"email": cfg["email"]},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created user '{u.username}'"))
            else:
                self.stdout.write(f"User '{u.username}' already exists")

            # reset on every run
            u.set_password(cfg["password"])
            u.is_staff = cfg["is_staff"]
            u.is_active = True
            u.save(update_fields=["password", "is_staff", "is_active"])

            Profile.objects.get_or_create(user=u)
            token, _ = Token.objects.get_or_create(user=u)
            self.stdout.write(f"  -> role={role}, token={token.key}")

        self.stdout.write(self.style.SUCCESS("Demo users ready."))
