import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront_admin.db")

# Public storefront URL, used for links inside emails
SITE_URL = os.getenv("SITE_URL", "http://localhost:3000")

# Store identity used as email sender name and invoice company fallback
STORE_NAME = os.getenv("STORE_NAME", "Storefront Personalizados")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", STORE_NAME)

# SMTP fallback when no configuration is stored in the settings table
EMAIL_SERVER_HOST = os.getenv("EMAIL_SERVER_HOST")
EMAIL_SERVER_PORT = os.getenv("EMAIL_SERVER_PORT")
EMAIL_SERVER_USER = os.getenv("EMAIL_SERVER_USER", "")
EMAIL_SERVER_PASSWORD = os.getenv("EMAIL_SERVER_PASSWORD", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@storefront.es")

# SMTP Encryption Key (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
SMTP_ENCRYPTION_KEY = os.getenv("SMTP_ENCRYPTION_KEY")

# Seconds before an SMTP connection attempt is abandoned
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "10"))

# Spanish VAT applied to orders and invoices unless the order carries its own tax
DEFAULT_TAX_RATE = float(os.getenv("DEFAULT_TAX_RATE", "0.21"))
