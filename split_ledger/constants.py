# split_ledger/constants.py
import os

# Allocation tolerance. Allocations within EPSILON of zero clamp to zero,
# and the allocated total may differ from the requested area by at most
# CONSERVATION_TOLERANCE.
EPSILON = float(os.getenv("SPLIT_EPSILON", "1e-9"))
CONSERVATION_TOLERANCE = 10 * EPSILON

# Width is catalogued in millimetres, length is requested in metres.
WIDTH_UNITS_PER_LENGTH_UNIT = int(os.getenv("SPLIT_WIDTH_UNITS_PER_LENGTH_UNIT", "1000"))

SYSTEM_OPERATOR = "SYSTEM"

# Inventory listing
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
LIST_MODE_ALL = "all"
LIST_MODE_AVAILABLE = "available"
