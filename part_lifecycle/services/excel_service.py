"""
Excel Service - Handles part list import from Excel and enriched result export
"""
import io
import re
from datetime import date
from typing import Any, Iterable, List, Optional

import pandas as pd
import structlog
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ..config import EXPORT_COLUMNS
from ..exceptions import ParseError, ReadError
from ..models import EnrichedRecord, PartRecord

logger = structlog.get_logger(__name__)

# Checked in order; the first populated column wins for each row
PART_COLUMN_ALIASES = ['Part', 'part', 'Part Number']
WEBSITE_COLUMN_ALIASES = ['Website', 'website', 'Websit']

EXCEL_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _normalize_header(text: Any) -> str:
    return re.sub(r'\s+', ' ', str(text).strip()).lower()


def _format_cell(val: Any) -> str:
    # Numeric part numbers come back as floats ("45136.0")
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val).strip()


def _read_first_sheet(file_content: bytes, filename: str) -> pd.DataFrame:
    excel_file = io.BytesIO(file_content)
    engine = 'xlrd' if filename.lower().endswith('.xls') else 'openpyxl'
    try:
        return pd.read_excel(excel_file, sheet_name=0, engine=engine, dtype=object)
    except Exception as e:
        logger.warning("excel_read_failed", filename=filename, error=str(e))
        raise ReadError() from e


def resolve_columns(columns: Iterable[Any], aliases: List[str]) -> List[Any]:
    """
    Order the sheet's columns by alias priority

    Exact header matches come first for each alias, then headers that only
    match after trimming whitespace and ignoring case.

    Args:
        columns: Column labels of the sheet
        aliases: Accepted header names, highest priority first

    Returns:
        Column labels to try for each row, in order
    """
    columns = list(columns)
    resolved = []
    for alias in aliases:
        for col in columns:
            if col == alias and col not in resolved:
                resolved.append(col)
        wanted = _normalize_header(alias)
        for col in columns:
            if col not in resolved and _normalize_header(col) == wanted:
                resolved.append(col)
    return resolved


def _pick_first_nonempty(row: pd.Series, candidates: List[Any]) -> str:
    for col in candidates:
        val = row[col]
        if pd.notna(val):
            text = _format_cell(val)
            if text:
                return text
    return ""


def parse_parts_file(file_content: bytes, filename: str) -> List[PartRecord]:
    """
    Parse the first sheet of an Excel file into part records

    Args:
        file_content: Binary content of the Excel file
        filename: Original filename, used to pick the reader engine

    Returns:
        PartRecord list in sheet order

    Raises:
        ReadError: if the file cannot be opened as a workbook
        ParseError: if no row has both a part and a website
    """
    df = _read_first_sheet(file_content, filename)

    part_columns = resolve_columns(df.columns, PART_COLUMN_ALIASES)
    website_columns = resolve_columns(df.columns, WEBSITE_COLUMN_ALIASES)

    records = []
    dropped = 0
    for _, row in df.iterrows():
        part = _pick_first_nonempty(row, part_columns)
        website = _pick_first_nonempty(row, website_columns)
        if not part or not website:
            dropped += 1
            continue
        records.append(PartRecord(part=part, website=website))

    logger.info("excel_parsed", filename=filename, rows=len(records), dropped=dropped)

    if not records:
        raise ParseError()

    return records


def _clean_export_value(val: Any) -> Any:
    # Control characters are not allowed in worksheet XML
    if isinstance(val, str):
        return ILLEGAL_CHARACTERS_RE.sub('', val)
    return val


def export_records_to_excel(records: Iterable[EnrichedRecord]) -> bytes:
    """
    Export enriched records to an Excel workbook

    Every value is written as plain text; a leading "=" never becomes a formula.

    Args:
        records: Records in display order

    Returns:
        Binary content of the .xlsx file
    """
    rows = [
        [_clean_export_value(val) for val in
         (record.part, record.website, record.link, record.lifecycle, record.datasheet)]
        for record in records
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=object)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Results')
        worksheet = writer.sheets['Results']
        for row in worksheet.iter_rows(min_row=2):
            for cell in row:
                if isinstance(cell.value, str) and cell.value.startswith('='):
                    cell.data_type = 's'
    return output.getvalue()


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"Part_Analysis_{day.isoformat()}.xlsx"
