"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MB = 1024 * 1024

DEFAULT_TOKEN_TTL_DAYS = 7
DEFAULT_TEAM_COLOR = "#C41E3A"
DEFAULT_MEMBER_ROLE = "member"
DEFAULT_EMPLOYEE_ROLE = "employee"
MIN_PASSWORD_LENGTH = 6

NOTE_COLORS = (
    "#ffffff",
    "#fff3cd",
    "#d1ecf1",
    "#d4edda",
    "#f8d7da",
    "#e2e3e5",
    "#cce5ff",
    "#ffeaa7",
)
DEFAULT_NOTE_COLOR = "#fff3cd"

# Upload limits per attachment kind (bytes).
UPLOAD_LIMITS = {
    "cv": 10 * MB,
    "report": 10 * MB,
    "portfolio": 25 * MB,
    "avatar": 10 * MB,
    "cover": 10 * MB,
}

# Signed upload links expire after this many minutes.
UPLOAD_URL_TTL_MINUTES = 15
