import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./viraweb.db")

# Supabase Auth Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
# JWT secret from Supabase project settings (Settings -> API -> JWT Secret)
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
# Cookie holding the access token when the frontend uses cookie sessions
SUPABASE_AUTH_COOKIE = os.getenv("SUPABASE_AUTH_COOKIE", "sb-access-token")
SUPABASE_PASSWORD_REDIRECT_URL = os.getenv("SUPABASE_PASSWORD_REDIRECT_URL")

# Stripe Configuration
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "brl")

# Frontend base URL for redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
# Public site URL used by sitemap.xml and robots.txt
SITE_URL = os.getenv("SITE_URL", "https://gds.viraweb.online").rstrip("/")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

# Resend Email Configuration (fallback)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "ViraWeb <noreply@viraweb.online>")

# SMTP Configuration (takes precedence over Resend when SMTP_HOST is set)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "false").lower() == "true"

# Support inbox notified about new tickets and replies
DEV_SUPPORT_EMAIL = os.getenv("DEV_SUPPORT_EMAIL")

# Unit price used when a completed appointment generates a financial session
DEFAULT_SESSION_PRICE = float(os.getenv("DEFAULT_SESSION_PRICE", "100.0"))
