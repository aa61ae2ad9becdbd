"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

MIN_CLASS_CAPACITY = 5
MAX_CLASS_CAPACITY = 30
DEFAULT_CLASS_CAPACITY = 20
MAX_CLASS_NAME_LENGTH = 50

GRADE_LEVELS = (
    "Lớp Mầm (3-4 tuổi)",
    "Lớp Chồi (4-5 tuổi)",
    "Lớp Lá (5-6 tuổi)",
)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

MIN_HEIGHT_CM = Decimal("50")
MAX_HEIGHT_CM = Decimal("200")
MIN_WEIGHT_KG = Decimal("5")
MAX_WEIGHT_KG = Decimal("100")
DEFAULT_MEASUREMENT_INTERVAL_DAYS = 30

DEFAULT_RECENT_MESSAGES = 50
DEFAULT_PARENT_RELATIONSHIP = "Parent"
