"""Constants and defaults.

Note: Keep business policy numbers here to avoid magic numbers spread across code.
Engines take them as defaults and accept overrides at construction time.
"""

MINUTES_PER_DAY = 1440

# CSV punch pairing: the out punch must fall within this many hours of the
# scheduled shift start.
PUNCH_WINDOW_HOURS = 14

# Only one of in/out recorded: pay this share of the scheduled day.
PARTIAL_PUNCH_PAY_FACTOR = 0.5

OT_MULTIPLIERS = (1, 1.5, 2)
DEFAULT_OT_MULTIPLIER = 1

# Performance score weights (attendance / punctuality / overtime).
ATTENDANCE_WEIGHT = 0.5
PUNCTUALITY_WEIGHT = 0.3
OT_WEIGHT = 0.2
# One OT hour per working day saturates the OT component at 100.
OT_SATURATION_HOURS_PER_DAY = 1.0

RATING_EXCELLENT_MIN = 90
RATING_GOOD_MIN = 75
RATING_AVERAGE_MIN = 60

MAX_CSV_BYTES = 5 * 1024 * 1024
CSV_COLUMNS = 6
CSV_MIMETYPES = ("text/csv", "text/plain", "application/csv", "application/vnd.ms-excel")

# Company pay period runs from the 18th of one month to the 17th of the next.
PAY_PERIOD_START_DAY = 18

LEAVE_ELIGIBILITY_DAYS = 90
PENDING_REQUEST_LOOKBACK_DAYS = 45
DEFAULT_TREND_PERIODS = 6
