from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.catalog"
    label = "catalog"

    def ready(self) -> None:
        from modules.catalog.events import (
            CatalogArchived,
            CatalogCommitted,
            ProductArchived,
            ProductUpdated,
        )
        from modules.catalog.handlers import (
            catalog_archived_handler,
            catalog_committed_handler,
            product_archived_handler,
            product_updated_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(CatalogCommitted, catalog_committed_handler)
        event_bus.subscribe(ProductUpdated, product_updated_handler)
        event_bus.subscribe(CatalogArchived, catalog_archived_handler)
        event_bus.subscribe(ProductArchived, product_archived_handler)
