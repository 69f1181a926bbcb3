# split_ledger/models/product_attributes.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Integer, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from split_ledger.db.base import Base


class ProductAttributes(Base):
    """
    Catalog row of a product variant. Reference data, read-only to the split engine.
    Two variants are compatible for splitting iff vendor_id, adhesive_type,
    basis_weight and material are all equal.
    """

    __tablename__ = "product_attributes"

    product_code :Mapped[str] = mapped_column(String(100), primary_key=True, comment="Variant code, upper case")

    width :Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Roll width in millimetres, positive",
    )

    # =========
    # Matching attributes
    # =========
    vendor_id :Mapped[str] = mapped_column(String(64), nullable=False, comment="Vendor reference")
    adhesive_type :Mapped[str] = mapped_column(String(100), nullable=False, comment="Adhesive type")
    basis_weight :Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, comment="Paper basis weight (gsm)")
    material :Mapped[str] = mapped_column(String(100), nullable=False, comment="Face material")

    description :Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Product description")

    __table_args__ = (
        Index(
            "idx_product_match",
            "vendor_id",
            "adhesive_type",
            "basis_weight",
            "material",
            "width",
        ),
    )

    def matching_attributes(self) -> dict:
        return {
            "vendor_id": self.vendor_id,
            "adhesive_type": self.adhesive_type,
            "basis_weight": self.basis_weight,
            "material": self.material,
        }

    def __repr__(self) -> str:
        return f"<ProductAttributes code={self.product_code} width={self.width}>"
