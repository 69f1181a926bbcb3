# split_ledger/tests/conftest.py
from decimal import Decimal

import pytest

from split_ledger.db.session import get_session, reset_engine
from split_ledger.db.init_db import init_db
from split_ledger.db.enums import ItemKind
from split_ledger.models.product_attributes import ProductAttributes
from split_ledger.repositories.catalog_repository import CatalogRepository
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.inventory_query_service import InventoryQueryService

MASTER_BUCKET = "P_1000 - 2.5"

# (code, width, vendor, adhesive, basis weight, material)
CATALOG = [
    ("P_1000", 1000, "V1", "A1", "120", "M1"),
    ("P_600", 600, "V1", "A1", "120", "M1"),
    ("P_500", 500, "V1", "A1", "120", "M1"),
    ("P_400", 400, "V1", "A1", "120", "M1"),
    ("P_300", 300, "V1", "A1", "120", "M1"),
    ("P_200", 200, "V1", "A1", "120", "M1"),
    ("Q_400", 400, "V2", "A1", "120", "M1"),
    ("R_400", 400, "V1", "A2", "120", "M1"),
    ("S_400", 400, "V1", "A1", "80", "M1"),
    ("T_400", 400, "V1", "A1", "120", "M2"),
]


@pytest.fixture
def database(tmp_path):
    # file database so that several threads and sessions share it
    reset_engine(f"sqlite:///{tmp_path / 'split_ledger_test.db'}")
    init_db()
    yield
    reset_engine()


@pytest.fixture
def db(database):
    session = get_session()
    yield session
    session.close()


@pytest.fixture
def catalog(db):
    repo = CatalogRepository(db)
    for code, width, vendor_id, adhesive_type, basis_weight, material in CATALOG:
        repo.add_product(ProductAttributes(
            product_code=code,
            width=width,
            vendor_id=vendor_id,
            adhesive_type=adhesive_type,
            basis_weight=Decimal(basis_weight),
            material=material,
            description=f"{code} test roll",
        ))
    db.commit()
    return repo


@pytest.fixture
def inventory(db, catalog):
    return InventoryQueryService(db, AuditLogService(db))


@pytest.fixture
def receipt(db, inventory):
    """A 100 m2 receipt of P_1000 bought at 2.5 per unit."""
    entry = inventory.record_receipt(
        product_code="P_1000",
        quantity=100,
        order_id="ORDER-1",
        secondary_quantity=12.5,
        actual_price_per_unit="2.5",
        declared_price_per_unit="2.5",
    )
    db.commit()
    return entry


@pytest.fixture
def hardware_receipt(db, inventory):
    entry = inventory.record_receipt(
        product_code="CORE_76",
        quantity=40,
        item_kind=ItemKind.hardware,
        order_id="ORDER-1",
        actual_price_per_unit="0.3",
    )
    db.commit()
    return entry


@pytest.fixture
def zero_width_product(db, catalog):
    """A catalog row matching P_1000's attributes but with no width."""
    product = catalog.add_product(ProductAttributes(
        product_code="Z_0",
        width=0,
        vendor_id="V1",
        adhesive_type="A1",
        basis_weight=Decimal("120"),
        material="M1",
        description="Z_0 degenerate roll",
    ))
    db.commit()
    return product


@pytest.fixture
def zero_width_receipt(db, inventory, zero_width_product):
    entry = inventory.record_receipt(product_code="Z_0", quantity=10, actual_price_per_unit="1")
    db.commit()
    return entry
