"""
Base interfaces for integration providers.
Abstract base classes for third-party service integrations.
"""
from abc import ABC, abstractmethod
from typing import List

from settlement_sam.models.lead import Lead


class SheetsProvider(ABC):
    """Base interface for spreadsheet delivery (Google Sheets)."""

    @abstractmethod
    async def append_lead(self, sheets_id: str, lead: Lead) -> str:
        """
        Append one lead row to the client's sheet.

        Returns:
            The updated range, e.g. "Sheet1!A5:Q5"
        """
        pass

    async def push_leads(self, sheets_id: str, leads: List[Lead]) -> int:
        """Append each lead in order. Returns how many were pushed."""
        count = 0
        for lead in leads:
            await self.append_lead(sheets_id, lead)
            count += 1
        return count
