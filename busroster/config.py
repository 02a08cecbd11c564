import os

server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

database_url = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
"""The tortoise connection string for the ledger database."""

api_root = "/api/v1"
"""The base url for the api."""

session_secret = os.getenv("SESSION_SECRET", "my secret")
"""The key used to sign session tokens."""

session_ttl_hours = int(os.getenv("SESSION_TTL_HOURS", 7 * 24))
"""How long a session token stays valid."""

email_host = os.getenv("EMAIL_HOST")
"""The SMTP host receipts are sent through."""

email_port = int(os.getenv("EMAIL_PORT", 587))
"""The SMTP port."""

email_user = os.getenv("EMAIL_USER")
"""The SMTP user, also used as the sender address."""

email_pass = os.getenv("EMAIL_PASS")
"""The SMTP password."""

sentry_dsn = os.getenv("SENTRY_DSN")
"""The sentry DSN, exceptions are only reported when this is set."""

default_admin_password = os.getenv("DEFAULT_ADMIN_PASSWORD", "password123")
"""The password given to the admin account created on first start."""
