from typing import Any, Dict, Optional, Union
from uuid import uuid4
from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from split_ledger.models.audit_log import AuditLog
from split_ledger.db.enums import AuditEntityType, AuditAction

class AuditLogService:
    """
    Centralized service for recording all auditable actions.
    This service is the ONLY place where AuditLog records can be created.
    """

    def __init__(self, db: Session):
        self.db = db

    def serialize_audit_value(self, value) -> Any:
        if value is None:
            return None
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, (int, float, str, bool)):
            return value
        if isinstance(value, dict):
            return {k: self.serialize_audit_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.serialize_audit_value(v) for v in value]
        return str(value)

    def _normalize_entity_type(self, entity_type: Union[str, AuditEntityType]) -> AuditEntityType:
        '''
        Accept an AuditEntityType, its value ("ledger_entry") or its name ("LedgerEntry").
        '''
        if isinstance(entity_type, AuditEntityType):
            return entity_type
        entity_type_str = str(entity_type).strip()
        for enum_member in AuditEntityType:
            if entity_type_str.lower() in (enum_member.value, enum_member.name.lower()):
                return enum_member
        raise ValueError(f"Unknown entity_type: {entity_type_str}. Valid values: {[e.value for e in AuditEntityType]}")

    def record_create(
        self,
        *,
        order_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        operator_id: str,
        after_value: Optional[Dict[str, Any]] = None,
    ) -> None:
        '''
        Record the creation of an entity.

        :param order_id: owning order, optional
        :param entity_type: AuditEntityType or its string form
        :param entity_id: id of the created entity
        :param operator_id: who triggered the creation
        :param after_value: optional snapshot of the created values
        '''
        log = AuditLog(
            id=str(uuid4()),
            order_id=order_id,
            entity_type=self._normalize_entity_type(entity_type),
            entity_id=entity_id,
            action=AuditAction.create,
            changed_attribute='__all__',
            before_value=None,
            after_value=self.serialize_audit_value(after_value),
            operator_id=operator_id,
            timestamp=datetime.now(timezone.utc),
        )
        self.db.add(log)

    def record_split(
        self,
        *,
        order_id: Optional[str],
        source_entry_id: str,
        before_value: Dict[str, Any],
        after_value: Dict[str, Any],
        operator_id: str,
    ) -> str:
        '''
        Record one executed split against its source entry.
        before_value carries the pre-split aggregate, after_value the plan and its breakdown.
        '''
        log = AuditLog(
            id=str(uuid4()),
            order_id=order_id,
            entity_type=AuditEntityType.LedgerEntry,
            entity_id=source_entry_id,
            action=AuditAction.split,
            changed_attribute="quantity",
            before_value=self.serialize_audit_value(before_value),
            after_value=self.serialize_audit_value(after_value),
            operator_id=operator_id,
            timestamp=datetime.now(timezone.utc),
        )
        self.db.add(log)
        return log.id
