# split_ledger/models/audit_log.py
from typing import Optional
from datetime import datetime

from sqlalchemy import String, DateTime, Enum, JSON, event, func
from sqlalchemy.orm import Mapped, mapped_column

from split_ledger.db.base import Base
from split_ledger.db.enums import AuditEntityType, AuditAction
from split_ledger.errors import ImmutableRecordError


class AuditLog(Base):
    __tablename__ = "audit_logs"

    # =========
    # Immutable fields (no update, no delete)
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Audit log UUID")

    order_id :Mapped[Optional[str]] = mapped_column(String(64), nullable=True, comment="Associated order ID, if applicable")

    entity_type :Mapped[AuditEntityType] = mapped_column(
        Enum(AuditEntityType, name="audit_entity_type"),
        nullable=False,
        comment="Type of the audited entity"
    )

    entity_id :Mapped[str] = mapped_column(String(36), nullable=False, comment="UUID of the audited entity")

    action :Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action"),
        nullable=False,
        comment="Type of action performed on the entity"
    )

    changed_attribute :Mapped[str] = mapped_column(String(100), nullable=False, comment="Attribute that was changed")

    before_value :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Value before the change")
    after_value :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Value after the change")

    operator_id :Mapped[str] = mapped_column(String(36), nullable=False, comment="Operator who performed the action")

    timestamp :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp when the action was performed"
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog entity={self.entity_type.value} "
            f"entity_id={self.entity_id} "
            f"action={self.action.value}>"
        )


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise ImmutableRecordError(f"Audit log {target.id} is immutable")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise ImmutableRecordError(f"Audit log {target.id} cannot be deleted")
