from datetime import date
from decimal import Decimal

from django.core.management.base import BaseCommand

from games.models import Game

DEMO_GAMES = [
    {
        "title": "Starfall Odyssey",
        "price": Decimal("59.99"),
        "original_price": Decimal("59.99"),
        "discount": 0,
        "developer": "Nebula Forge",
        "publisher": "Nebula Forge",
        "release_date": date(2024, 3, 14),
        "tags": ["RPG", "Open World", "Sci-Fi"],
        "categories": ["Single-player"],
        "is_featured": True,
    },
    {
        "title": "Pixel Harbor",
        "price": Decimal("14.99"),
        "original_price": Decimal("19.99"),
        "discount": 25,
        "developer": "Tiny Lantern",
        "publisher": "Tiny Lantern",
        "release_date": date(2023, 9, 2),
        "tags": ["Indie", "Simulation", "Cozy"],
        "categories": ["Single-player"],
        "is_featured": False,
    },
    {
        "title": "Iron Vanguard",
        "price": Decimal("39.99"),
        "original_price": Decimal("39.99"),
        "discount": 0,
        "developer": "Bastion Works",
        "publisher": "Greywall Publishing",
        "release_date": date(2024, 11, 20),
        "tags": ["Strategy", "Multiplayer"],
        "categories": ["Multi-player", "PvP"],
        "is_featured": True,
    },
]


class Command(BaseCommand):
    help = "Create or update a handful of demo catalog entries."

    def handle(self, *args, **options):
        for cfg in DEMO_GAMES:
            slug = cfg["title"].lower().replace(" ", "-")
            defaults = {
                **cfg,
                "description": f"{cfg['title']} is a demo title seeded for local development.",
                "short_description": f"Demo entry: {cfg['title']}.",
                "header_image": f"https://example.com/images/{slug}/header.jpg",
                "capsule_image": f"https://example.com/images/{slug}/capsule.jpg",
            }
            game, created = Game.objects.update_or_create(title=cfg["title"], defaults=defaults)
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created game '{game.title}'"))
            else:
                self.stdout.write(f"Updated game '{game.title}'")

        self.stdout.write(self.style.SUCCESS("Demo catalog ready."))
