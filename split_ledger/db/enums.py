# split_ledger/db/enums.py
import enum

# AuditLog related enums
class AuditEntityType(enum.Enum):
    LedgerEntry = "ledger_entry"


class AuditAction(enum.Enum):
    create = "create"
    split = "split"

# LedgerEntry related enums
class ItemKind(enum.Enum):
    product = "product"      # dimensioned, area based
    hardware = "hardware"    # counted
