"""Configuration management for the Household ledger application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = _flag('DEBUG', 'False')
APP_URL: Final[str] = os.getenv('APP_URL', 'http://localhost:5173')

# TrackingMore (parcel tracking)
TRACKINGMORE_API_KEY: Final[str] = os.getenv('TRACKINGMORE_API_KEY', '')
TRACKINGMORE_BASE_URL: Final[str] = os.getenv('TRACKINGMORE_BASE_URL', 'https://api.trackingmore.com/v4')
TRACKING_WEBHOOK_SECRET: Final[str] = os.getenv('TRACKING_WEBHOOK_SECRET', '')
POLL_RATE_LIMIT_SECONDS: Final[float] = float(os.getenv('POLL_RATE_LIMIT_SECONDS', '0.2'))

# Google OAuth (Gmail connection)
GOOGLE_CLIENT_ID: Final[str] = os.getenv('GOOGLE_CLIENT_ID', '')
GOOGLE_CLIENT_SECRET: Final[str] = os.getenv('GOOGLE_CLIENT_SECRET', '')
GOOGLE_REDIRECT_URI: Final[str] = os.getenv('GOOGLE_REDIRECT_URI', 'http://localhost:8000/api/gmail/oauth/callback')

# Market data
YAHOO_CHART_URL: Final[str] = os.getenv('YAHOO_CHART_URL', 'https://query1.finance.yahoo.com/v8/finance/chart')

# Background sync
BACKGROUND_SYNC_ENABLED: Final[bool] = _flag('BACKGROUND_SYNC_ENABLED', 'False')
SYNC_INTERVAL_SECONDS: Final[float] = float(os.getenv('SYNC_INTERVAL_SECONDS', '300'))
SYNC_INITIAL_DELAY_SECONDS: Final[float] = float(os.getenv('SYNC_INITIAL_DELAY_SECONDS', '5'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('HOUSEHOLD_DATA_DIR', str(BASE_DIR / 'data')))
