from typing import Final

ISO_DATE: Final[str] = "%Y-%m-%d"

# Pay cycle
DEFAULT_PAYDAY_DATE: Final[int] = 20
DEFAULT_ADJUSTMENT_RULE: Final[str] = "previous_working_day"

# England & Wales bank holidays, used until a holiday table is loaded
UK_BANK_HOLIDAYS: Final[tuple[str, ...]] = (
    # 2024
    "2024-01-01", "2024-03-29", "2024-04-01", "2024-05-06",
    "2024-05-27", "2024-08-26", "2024-12-25", "2024-12-26",
    # 2025
    "2025-01-01", "2025-04-18", "2025-04-21", "2025-05-05",
    "2025-05-26", "2025-08-25", "2025-12-25", "2025-12-26",
    # 2026
    "2026-01-01", "2026-04-03", "2026-04-06", "2026-05-04",
    "2026-05-25", "2026-08-31", "2026-12-25", "2026-12-28",
    # 2027
    "2027-01-01", "2027-03-26", "2027-03-29", "2027-05-03",
    "2027-05-31", "2027-08-30", "2027-12-27", "2027-12-28",
    # 2028
    "2028-01-03", "2028-04-14", "2028-04-17", "2028-05-01",
    "2028-05-29", "2028-08-28", "2028-12-25", "2028-12-26",
    # 2029
    "2029-01-01", "2029-03-30", "2029-04-02", "2029-05-07",
    "2029-05-28", "2029-08-27", "2029-12-25", "2029-12-26",
    # 2030
    "2030-01-01", "2030-04-19", "2030-04-22", "2030-05-06",
    "2030-05-27", "2030-08-26", "2030-12-25", "2030-12-26",
)

# Bills
DEFAULT_BILL_START: Final[str] = "2020-01-01"

# Stock forecasting
LOW_STOCK_DAYS: Final[int] = 14
REORDER_SOON_DAYS: Final[int] = 7
SAFETY_BUFFER_DAYS: Final[int] = 2
USAGE_LOOKBACK_DAYS: Final[int] = 30
DAYS_PER_MONTH: Final[int] = 30

# Investments
CONSERVATIVE_OFFSET: Final[float] = -3.0
AGGRESSIVE_OFFSET: Final[float] = 4.0
RISK_PRESETS: Final[dict[str, float]] = {"conservative": 5.0, "medium": 8.0, "aggressive": 12.0}

# Nutrition
ACTIVITY_MULTIPLIERS: Final[dict[str, float]] = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extremely_active": 1.9,
}
GOAL_ADJUSTMENTS: Final[dict[str, int]] = {"maintain": 0, "cut": -300, "bulk": 200}
DEFAULT_PROTEIN_PER_KG: Final[float] = 2.2
DEFAULT_FAT_PER_KG: Final[float] = 0.8
MACRO_TOLERANCE_KCAL: Final[float] = 5.0

# Parcel tracking
POLL_BATCH_LIMIT: Final[int] = 50
POLL_STALE_AFTER_HOURS: Final[int] = 1
PENDING_BACKOFF_AFTER_HOURS: Final[int] = 48
PENDING_BACKOFF_INTERVAL_HOURS: Final[int] = 6
TRACKINGMORE_ALREADY_EXISTS: Final[int] = 4016

# Alerts
MAX_ALERT_EVENTS: Final[int] = 300
