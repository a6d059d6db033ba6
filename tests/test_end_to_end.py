"""End-to-end: spreadsheet in, enriched spreadsheet out."""
import io

import pandas as pd

from helpers import StubEnrichmentClient, make_workbook
from part_lifecycle.models import EnrichmentResult, PartRecord, RowStatus
from part_lifecycle.services.excel_service import export_records_to_excel, parse_parts_file
from part_lifecycle.services.row_processor import RowProcessor

ABC123_RESULT = EnrichmentResult(
    link="https://vendor.com/abc123",
    lifecycle="Active",
    datasheet="https://vendor.com/abc123.pdf",
)


def test_upload_process_export():
    content = make_workbook(
        [
            {"Part": "ABC123", "Website": "vendor.com"},
            {"Part": "", "Website": "vendor2.com"},
        ]
    )

    records = parse_parts_file(content, "parts.xlsx")
    assert records == [PartRecord(part="ABC123", website="vendor.com")]

    client = StubEnrichmentClient(responses={"ABC123": ABC123_RESULT})
    processor = RowProcessor(client)
    processor.load(records)
    processor.start(blocking=True)

    [record] = processor.records
    assert record.status is RowStatus.COMPLETED
    assert record.link == "https://vendor.com/abc123"
    assert record.lifecycle == "Active"
    assert record.datasheet == "https://vendor.com/abc123.pdf"
    assert client.calls == [("ABC123", "vendor.com")]

    df = pd.read_excel(io.BytesIO(export_records_to_excel(processor.records)), dtype=object)
    assert df.values.tolist() == [
        ["ABC123", "vendor.com", "https://vendor.com/abc123", "Active", "https://vendor.com/abc123.pdf"],
    ]
