"""Constants for Gmail Usage Report."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".gmail-usage-report"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
CHECKPOINT_DB_PATH = CONFIG_DIR / "checkpoint.db"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
BATCH_SIZE = 50  # threads.get requests per BatchHttpRequest
MAX_PAGE_SIZE = 500  # Gmail caps threads.list maxResults
UNREAD_LABEL = "UNREAD"

# --- Run defaults ---
PAGE_SIZE = 100  # threads per page
MAX_THREADS_PER_RUN = 2000
PACING_DELAY_MS = 500  # sleep between page fetches

# --- Address fallbacks ---
# Used when a From header carries no recognisable local@domain address.
UNKNOWN_EMAIL = "unknown@unknown"
UNKNOWN_DOMAIN = "unknown"

# --- Report ---
BYTES_PER_MB = 1024 * 1024
TITLE_OVERVIEW = "Overview"
TITLE_BY_SENDER = "By Sender"
TITLE_BY_DOMAIN = "By Domain"
TITLE_BY_LABEL = "By Label"
