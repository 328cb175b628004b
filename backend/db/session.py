import logging
import os

from dotenv import load_dotenv

from db.errors import StoreUnavailable
from db.memory_backend import InMemoryGridBackend
from db.tabular_store import TabularStore

load_dotenv()

logger = logging.getLogger(__name__)

SHEETS_BACKEND = os.getenv("SHEETS_BACKEND", "google").strip().lower()
SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID", "")
GOOGLE_SA_FILE = os.getenv(
    "GOOGLE_SA_FILE",
    os.getenv("GOOGLE_PRIVATE_KEY_PATH", "./credentials/google-service-account.json"),
)
GOOGLE_HTTP_TIMEOUT_SECONDS = int(os.getenv("GOOGLE_HTTP_TIMEOUT_SECONDS", "10"))


def _env_credentials() -> dict | None:
    private_key = os.getenv("GOOGLE_SHEETS_PRIVATE_KEY")
    client_email = os.getenv("GOOGLE_SHEETS_CLIENT_EMAIL")
    if not private_key or not client_email:
        return None

    return {
        "type": "service_account",
        "project_id": os.getenv("GOOGLE_PROJECT_ID", ""),
        "private_key_id": os.getenv("GOOGLE_PRIVATE_KEY_ID", ""),
        # keys pasted into env files carry literal "\n" sequences
        "private_key": private_key.replace("\\n", "\n"),
        "client_email": client_email,
        "client_id": os.getenv("GOOGLE_CLIENT_ID_SERVICE", ""),
        "token_uri": "https://oauth2.googleapis.com/token",
    }


def open_store(backend_name: str | None = None) -> TabularStore:
    """Build a ready TabularStore or raise StoreUnavailable."""
    name = (backend_name or SHEETS_BACKEND).strip().lower()

    if name == "memory":
        logger.warning("Using in-memory sheets backend; data is lost on restart")
        return TabularStore(InMemoryGridBackend())

    if name != "google":
        raise StoreUnavailable(f"Unknown SHEETS_BACKEND: {name}")
    if not SPREADSHEET_ID:
        raise StoreUnavailable("GOOGLE_SHEETS_SPREADSHEET_ID is not set")

    from db.google_sheets import GoogleSheetsBackend

    credentials = _env_credentials()
    logger.info(
        "Using %s credentials for Google Sheets",
        "environment variable" if credentials else "file-based",
    )
    backend = GoogleSheetsBackend(
        spreadsheet_id=SPREADSHEET_ID,
        credentials_info=credentials,
        service_account_path=None if credentials else GOOGLE_SA_FILE,
        timeout_seconds=GOOGLE_HTTP_TIMEOUT_SECONDS,
    ).connect()
    return TabularStore(backend)
