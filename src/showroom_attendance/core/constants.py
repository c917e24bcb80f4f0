"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_BUSINESS_UNIT = "electronics"
SYSTEM_ACTOR = "system"

# Penalty policy defaults, used until an administrator saves settings.
DEFAULT_HOURLY_PENALTY_RATE = 50.0
DEFAULT_LEAVE_PENALTY_RATE = 500.0
DEFAULT_LATE_ARRIVAL_THRESHOLD_MINUTES = 15
DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES = 15
DEFAULT_WORKING_HOURS_PER_DAY = 8.0
DEFAULT_EXPECTED_CHECK_IN = time(9, 0)
DEFAULT_EXPECTED_CHECK_OUT = time(18, 0)
DEFAULT_PAID_LEAVES_PER_MONTH = 2

MINUTES_PER_HOUR = 60
CURRENCY_DECIMALS = 2
