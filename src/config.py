"""
Configuration module for Stitchbook
Loads environment variables (and .env for local dev) and validates configuration
"""
import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

# Get project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables from .env file (if exists - local dev only)
env_file = PROJECT_ROOT / '.env'
if env_file.exists():
    load_dotenv(env_file)

# ═══════════════════════════════════════════════════════════════════
# WRITABLE PATHS - Handle containerized environments
# ═══════════════════════════════════════════════════════════════════

def get_writable_path(folder_name: str) -> str:
    """Get a writable path that works in all environments"""
    env_path = os.getenv(folder_name.upper() + '_FOLDER')
    if env_path:
        if os.path.isabs(env_path):
            path = Path(env_path)
        else:
            path = PROJECT_ROOT / env_path
    else:
        path = PROJECT_ROOT / folder_name

    # In containers, /app might be read-only; use /tmp as fallback
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (PermissionError, OSError):
            path = Path(tempfile.gettempdir()) / 'stitchbook' / folder_name
            path.mkdir(parents=True, exist_ok=True)

    return str(path)

# ═══════════════════════════════════════════════════════════════════
# CONFIGURATION VALUES
# ═══════════════════════════════════════════════════════════════════

# Storage
DATA_FOLDER = get_writable_path('data')
EXPORT_FOLDER = get_writable_path('exports')
LOG_FOLDER = get_writable_path('logs')

# Persisted record keys (one JSON document per key)
DESIGNS_STORAGE_KEY = os.getenv('DESIGNS_STORAGE_KEY', 'designs')
ADMIN_FLAG_STORAGE_KEY = os.getenv('ADMIN_FLAG_STORAGE_KEY', 'is_admin')
STORAGE_SCHEMA_VERSION = 1

# Billing
DEFAULT_GST_PERCENTAGE = float(os.getenv('DEFAULT_GST_PERCENTAGE', '18'))
BILL_NUMBER_PREFIX = os.getenv('BILL_NUMBER_PREFIX', 'BILL')
# Shown in export column headers; the built-in PDF fonts have no rupee glyph
CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', 'Rs.')

# Upper bounds for line-item input (keeps every derived total finite)
MAX_ITEM_PRICE = float(os.getenv('MAX_ITEM_PRICE', '10000000'))
MAX_ITEM_QUANTITY = int(os.getenv('MAX_ITEM_QUANTITY', '100000'))

# Durable bill history (off by default: saved bills live for the session only)
ENABLE_BILL_LEDGER = os.getenv('ENABLE_BILL_LEDGER', 'false').lower() == 'true'
BILL_LEDGER_PATH = os.getenv('BILL_LEDGER_PATH', str(Path(DATA_FOLDER) / 'bills.db'))

# Access gate (single shared passphrase)
ADMIN_PASSPHRASE = os.getenv('ADMIN_PASSPHRASE', 'admin123')

# Google Gemini Configuration (design-number recognition)
GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY')
OCR_MODEL_NAME = os.getenv('OCR_MODEL_NAME', 'gemini-2.5-flash')
OCR_TIMEOUT_SECONDS = float(os.getenv('OCR_TIMEOUT_SECONDS', '30'))
ALLOWED_IMAGE_FORMATS = os.getenv('ALLOWED_IMAGE_FORMATS', 'jpg,jpeg,png,webp').split(',')

# Export
EXPORT_TIMEOUT_SECONDS = float(os.getenv('EXPORT_TIMEOUT_SECONDS', '20'))
SHOP_NAME = os.getenv('SHOP_NAME', 'Stitchbook Tailoring')

# Monitoring Configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE_MAX_MB = int(os.getenv('LOG_FILE_MAX_MB', '10'))
LOG_FILE_BACKUP_COUNT = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))


# ═══════════════════════════════════════════════════════════════════
# REST API (FastAPI + Swagger + JWT session tokens)
# ═══════════════════════════════════════════════════════════════════

API_PORT = int(os.getenv('API_PORT', '8000'))
API_HOST = os.getenv('API_HOST', '0.0.0.0')

# Cloud Run sets PORT to the single port it routes traffic to
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)

# JWT configuration
API_JWT_SECRET = os.getenv('API_JWT_SECRET', '')
API_JWT_ALGORITHM = os.getenv('API_JWT_ALGORITHM', 'HS256')
API_JWT_EXPIRY_MINUTES = int(os.getenv('API_JWT_EXPIRY_MINUTES', '480'))

# CORS configuration (comma-separated origins)
API_CORS_ORIGINS = os.getenv('API_CORS_ORIGINS', 'http://localhost:5173').split(',')


def validate_config():
    """Validate that all required configuration is present"""
    errors = []

    if not ADMIN_PASSPHRASE:
        errors.append("ADMIN_PASSPHRASE is not set")

    if not API_JWT_SECRET:
        errors.append("API_JWT_SECRET is not set")

    if not 0 <= DEFAULT_GST_PERCENTAGE <= 100:
        errors.append(f"DEFAULT_GST_PERCENTAGE must be between 0 and 100, got {DEFAULT_GST_PERCENTAGE}")

    if OCR_TIMEOUT_SECONDS <= 0:
        errors.append("OCR_TIMEOUT_SECONDS must be positive")

    if EXPORT_TIMEOUT_SECONDS <= 0:
        errors.append("EXPORT_TIMEOUT_SECONDS must be positive")

    if not GOOGLE_API_KEY:
        errors.append("GOOGLE_API_KEY is not set (design-number recognition will fail)")

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join(errors))

    return True


if __name__ == "__main__":
    try:
        validate_config()
        print("[OK] Configuration validated successfully")
    except ValueError as e:
        print(f"[FAIL] Configuration validation failed:\n{e}")
