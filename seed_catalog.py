# seed_catalog.py
# Seed a demo catalog and a few receipts so the split endpoints have something to work on.
from decimal import Decimal

from split_ledger.db.session import get_session
from split_ledger.db.auto_init import auto_init
from split_ledger.db.enums import ItemKind
from split_ledger.logger import get_logger
from split_ledger.models.product_attributes import ProductAttributes
from split_ledger.repositories.catalog_repository import CatalogRepository
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.inventory_query_service import InventoryQueryService

logger = get_logger(__name__)

# (product_code, width, vendor_id, adhesive_type, basis_weight, material, description)
catalog_data = [
    ("P_1000", 1000, "V1", "A1", "120", "M1", "Thermal label roll 1000mm"),
    ("P_600", 600, "V1", "A1", "120", "M1", "Thermal label roll 600mm"),
    ("P_500", 500, "V1", "A1", "120", "M1", "Thermal label roll 500mm"),
    ("P_400", 400, "V1", "A1", "120", "M1", "Thermal label roll 400mm"),
    ("P_300", 300, "V1", "A1", "120", "M1", "Thermal label roll 300mm"),
    ("P_200", 200, "V1", "A1", "120", "M1", "Thermal label roll 200mm"),
    ("Q_400", 400, "V2", "A1", "120", "M1", "Other vendor roll 400mm"),
    ("R_400", 400, "V1", "A2", "120", "M1", "Hot-melt adhesive roll 400mm"),
]

# (product_code, quantity, actual_price_per_unit, item_kind)
receipt_data = [
    ("P_1000", 100, "2.5", ItemKind.product),
    ("P_1000", 50, "2.75", ItemKind.product),
    ("CORE_76", 40, "0.3", ItemKind.hardware),
]


def seed():
    db = get_session()
    try:
        catalog = CatalogRepository(db)
        for code, width, vendor_id, adhesive_type, basis_weight, material, description in catalog_data:
            if catalog.get_product_attributes(code) is not None:
                continue
            catalog.add_product(ProductAttributes(
                product_code=code,
                width=width,
                vendor_id=vendor_id,
                adhesive_type=adhesive_type,
                basis_weight=Decimal(basis_weight),
                material=material,
                description=description,
            ))

        inventory = InventoryQueryService(db, AuditLogService(db))
        for code, quantity, price, kind in receipt_data:
            entry = inventory.record_receipt(
                product_code=code,
                quantity=quantity,
                item_kind=kind,
                order_id="SEED-ORDER",
                actual_price_per_unit=price,
                declared_price_per_unit=price,
            )
            logger.info(f"Seeded receipt {entry.entry_id} into bucket {entry.bucket_key}")

        db.commit()
        logger.info("Catalog and receipts seeded")
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    from run import configure_database
    configure_database()
    auto_init()
    seed()
