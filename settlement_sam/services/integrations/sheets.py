"""
Google Sheets providers.
Rows go through the Sheets REST API v4 with a service-account session.
"""
import asyncio
import logging
from typing import Optional
from urllib.parse import quote

from google.oauth2 import service_account
from google.auth.transport.requests import AuthorizedSession

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import ExternalServiceError, NotConfiguredError
from settlement_sam.models.lead import Lead
from settlement_sam.services.estimator import format_currency
from settlement_sam.services.integrations.base import SheetsProvider

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
SHEET_RANGE = "Sheet1!A:Q"
HEADER_RANGE = "Sheet1!A1:Q1"

SHEET_HEADERS = [
    "ID", "Name", "Phone", "Carrier", "Injury Type", "Surgery", "Hospitalized",
    "In Treatment", "Missed Work", "Lost Wages",
    "Estimate Low", "Estimate High", "Score", "Tier", "Source",
    "Verified", "Submitted",
]

INJURY_LABELS = {
    "soft_tissue": "Soft Tissue",
    "fracture": "Fracture",
    "tbi": "TBI",
    "spinal": "Spinal Cord",
    "other": "Other",
}


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def lead_row(lead: Lead) -> list:
    """One sheet row, in SHEET_HEADERS order."""
    return [
        str(lead.id),
        lead.name,
        lead.phone,
        lead.carrier or "",
        INJURY_LABELS.get(lead.injury_type, lead.injury_type),
        _yes_no(lead.surgery),
        _yes_no(lead.hospitalized),
        _yes_no(lead.still_in_treatment),
        _yes_no(lead.missed_work),
        format_currency(lead.lost_wages) if lead.lost_wages > 0 else "$0",
        format_currency(lead.estimate_low),
        format_currency(lead.estimate_high),
        lead.score,
        lead.tier,
        lead.source,
        _yes_no(lead.verified),
        lead.created_at.isoformat(),
    ]


class GoogleSheetsProvider(SheetsProvider):
    """
    Sheets API v4 over an authorized requests session.
    The spreadsheet must share Editor access with the service account.
    """

    def __init__(self, settings: Settings = default_settings):
        email = settings.GOOGLE_SERVICE_ACCOUNT_EMAIL
        # Keys pasted into .env carry literal \n
        key = settings.GOOGLE_SERVICE_ACCOUNT_KEY.replace("\\n", "\n")
        if not email or not key:
            raise NotConfiguredError(
                "Google Sheets",
                "Set GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_SERVICE_ACCOUNT_KEY in .env"
            )

        creds = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": email,
                "private_key": key,
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=SCOPES,
        )
        self.session = AuthorizedSession(creds)

    def _values_url(self, sheets_id: str, range_: str, suffix: str = "") -> str:
        return f"{SHEETS_API}/{sheets_id}/values/{quote(range_)}{suffix}"

    def _ensure_headers(self, sheets_id: str) -> None:
        """Write the header row once, when row 1 is empty."""
        r = self.session.get(self._values_url(sheets_id, HEADER_RANGE), timeout=10)
        r.raise_for_status()
        if r.json().get("values"):
            return
        r = self.session.post(
            self._values_url(sheets_id, SHEET_RANGE, ":append"),
            params={"valueInputOption": "RAW"},
            json={"values": [SHEET_HEADERS]},
            timeout=10,
        )
        r.raise_for_status()

    def _append(self, sheets_id: str, row: list) -> str:
        self._ensure_headers(sheets_id)
        r = self.session.post(
            self._values_url(sheets_id, SHEET_RANGE, ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [row]},
            timeout=10,
        )
        r.raise_for_status()
        return r.json().get("updates", {}).get("updatedRange", SHEET_RANGE)

    async def append_lead(self, sheets_id: str, lead: Lead) -> str:
        try:
            updated = await asyncio.to_thread(self._append, sheets_id, lead_row(lead))
        except Exception as e:
            logger.error("Sheets append failed for %s: %s", sheets_id, e)
            raise ExternalServiceError("Google Sheets", str(e)) from e

        logger.info("Lead %s appended to sheet %s (%s)", lead.id, sheets_id, updated)
        return updated


class MockSheetsProvider(SheetsProvider):
    """Keeps rows in memory, for development and tests."""

    def __init__(self):
        self.rows: dict = {}

    async def append_lead(self, sheets_id: str, lead: Lead) -> str:
        rows = self.rows.setdefault(sheets_id, [SHEET_HEADERS])
        rows.append(lead_row(lead))
        logger.info("MOCK SHEETS append to %s: lead %s", sheets_id, lead.id)
        return f"Sheet1!A{len(rows)}:Q{len(rows)}"


# =============================================================================
# SHEETS PROVIDER SINGLETON
# =============================================================================

_sheets_provider: Optional[SheetsProvider] = None


def get_sheets_provider() -> SheetsProvider:
    """Google Sheets when a service account is configured, otherwise the mock."""
    global _sheets_provider

    if _sheets_provider is None:
        if default_settings.GOOGLE_SERVICE_ACCOUNT_EMAIL and default_settings.GOOGLE_SERVICE_ACCOUNT_KEY:
            logger.info("Using Google Sheets provider")
            _sheets_provider = GoogleSheetsProvider()
        else:
            logger.info("Using Mock Sheets provider (rows kept in memory)")
            _sheets_provider = MockSheetsProvider()

    return _sheets_provider


def set_sheets_provider(provider: Optional[SheetsProvider]) -> None:
    """Set custom sheets provider (for testing)."""
    global _sheets_provider
    _sheets_provider = provider
