"""Test helpers: in-memory workbooks and stub enrichment clients."""
import io
import threading
from typing import Dict, List, Optional

import pandas as pd

from part_lifecycle.models import EnrichmentResult


def make_workbook(rows: List[Dict[str, object]], columns: Optional[List[str]] = None,
                  extra_sheets: Optional[Dict[str, pd.DataFrame]] = None) -> bytes:
    """Build an .xlsx file whose first sheet holds ``rows``."""
    df = pd.DataFrame(rows, columns=columns)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Parts')
        for name, sheet in (extra_sheets or {}).items():
            sheet.to_excel(writer, index=False, sheet_name=name)
    return output.getvalue()


def result_for(part: str) -> EnrichmentResult:
    return EnrichmentResult(
        link=f"https://vendor.com/{part.lower()}",
        lifecycle="Active",
        datasheet=f"https://vendor.com/{part.lower()}.pdf",
    )


class StubEnrichmentClient:
    """Records calls; returns a canned result or whatever ``responses`` maps a part to."""

    def __init__(self, responses: Optional[Dict[str, object]] = None, on_call=None):
        self.responses = responses or {}
        self.on_call = on_call
        self.calls = []

    def enrich(self, part: str, website: str):
        self.calls.append((part, website))
        if self.on_call is not None:
            self.on_call(part, website)
        response = self.responses.get(part)
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        return result_for(part)


class BlockingEnrichmentClient:
    """Blocks inside enrich() until released, so tests can act mid-call."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = []

    def enrich(self, part: str, website: str):
        self.calls.append((part, website))
        self.entered.set()
        if not self.release.wait(5):
            raise TimeoutError("test never released the client")
        return result_for(part)


