from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.catalog.exceptions import CatalogConflict
from modules.catalog.repositories.django_repository import CatalogDjangoStore
from modules.catalog.services import CatalogCommitService

SEED_CATALOGS = [
    {
        "sku_prefix": "shirt",
        "name": "Classic T-Shirt",
        "subtitle": "100% cotton",
        "brand": "Acme",
        "price": Decimal("59.90"),
        "quantity": 25,
        "options": [
            {"name": "Size", "values": ["Small", "Medium", "Large"]},
            {"name": "Color", "values": ["Red", "Blue"]},
        ],
    },
    {
        "sku_prefix": "hoodie",
        "name": "Zip Hoodie",
        "brand": "Acme",
        "price": Decimal("189.00"),
        "on_sale": True,
        "sale_price": Decimal("149.00"),
        "quantity": 10,
        "options": [
            {"name": "Size", "values": ["Small", "Large"]},
            {"name": "Color", "values": ["Black", "Grey"]},
            {"name": "Fit", "values": ["Regular", "Slim"]},
        ],
    },
    {
        "sku_prefix": "mug",
        "name": "Ceramic Mug",
        "upc": "012345678905",
        "price": Decimal("34.50"),
        "quantity": 100,
        "taxable": True,
        "product_weight": Decimal("0.35"),
    },
]


class Command(BaseCommand):
    help = "Seed database with sample catalogs (roots, options and variants)."

    def handle(self, *args, **options):
        self.stdout.write("Seeding catalogs...")
        service = CatalogCommitService(store=CatalogDjangoStore())

        committed = 0
        skipped = 0
        variants = 0
        for payload in SEED_CATALOGS:
            try:
                graph = service.commit_catalog(payload)
            except CatalogConflict:
                self.stdout.write(f"  {payload['sku_prefix']}: already present, skipped")
                skipped += 1
                continue
            committed += 1
            variants += len(graph.products)
            self.stdout.write(f"  {graph.sku_prefix}: {len(graph.products)} variants")

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"roots={committed}, "
                f"skipped={skipped}, "
                f"variants={variants}"
            )
        )
