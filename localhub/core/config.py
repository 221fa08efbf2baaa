"""Runtime settings read from the environment (optionally a .env file)."""

import os

from localhub.utils.env_helper import env_bool, env_int, env_list

SUPABASE_URL = os.getenv("PUBLIC_SUPABASE_URL")
SUPABASE_KEY = os.getenv("SECRET_API_KEY")

SESSION_HEADER = "x-session-token"
SESSION_TTL_HOURS = env_int("SESSION_TTL_HOURS", 24 * 7)
# An active session that expired less than this long ago can still be refreshed.
SESSION_REFRESH_GRACE_HOURS = env_int("SESSION_REFRESH_GRACE_HOURS", 24)

REPORT_HIDE_THRESHOLD = env_int("REPORT_HIDE_THRESHOLD", 10)
DELETION_GRACE_DAYS = env_int("DELETION_GRACE_DAYS", 3)
EMAIL_VERIFICATION_TTL_HOURS = env_int("EMAIL_VERIFICATION_TTL_HOURS", 24)
DEFAULT_JOB_EXPIRY_DAYS = env_int("DEFAULT_JOB_EXPIRY_DAYS", 7)
SEARCH_RESULT_LIMIT = env_int("SEARCH_RESULT_LIMIT", 20)

# TODO: update origins for prod
CORS_ORIGINS = env_list(
    "CORS_ORIGINS", ["http://localhost:5173", "http://localhost:8080"]
)

LOG_FORMAT_JSON = env_bool("LOG_FORMAT_JSON", default=False)
