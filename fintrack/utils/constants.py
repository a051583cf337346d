"""
Application constants.
"""

# Sessions
SESSION_TOKEN_BYTES = 32
OAUTH_STATE_COOKIE_NAME = "oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60  # seconds

# Firestore collections
USERS_COLLECTION = "users"
SESSIONS_COLLECTION = "sessions"
TRANSACTIONS_COLLECTION = "transactions"

# GitHub OAuth
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
GITHUB_OAUTH_SCOPE = "user:email"
GITHUB_PROVIDER_DOMAIN = "github.com"
NOREPLY_EMAIL_TEMPLATE = "{login}@users.noreply.{provider}"

# Reports
DEFAULT_REPORT_MONTHS = 6
DEFAULT_TOP_CONCEPTS = 10
CSV_DATE_FORMAT = "%d/%m/%Y"
CSV_FILENAME_TEMPLATE = "transactions_report_{date}.csv"

# Validation
MAX_CONCEPT_LENGTH = 200
MAX_NAME_LENGTH = 100
MAX_AMOUNT = 1_000_000_000_000
