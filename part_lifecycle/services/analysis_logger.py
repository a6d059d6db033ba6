"""
Analysis Logger - Write finished enrichment runs to .txt and .json files
Works in both development and when packaged as .exe
"""
import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from .. import config

logger = structlog.get_logger(__name__)


def get_log_directory() -> str:
    """
    Get the directory where run logs are saved, creating it if needed.
    RUN_LOG_DIR wins; otherwise a logs/ folder next to the package or exe.
    """
    log_dir = config.RUN_LOG_DIR or os.path.join(config.get_base_dir(), 'logs')
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def format_record(index: int, record: Dict[str, Any]) -> str:
    lines = [
        "=" * 80,
        f"Row #{index}",
        f"Part: {record.get('part', 'N/A')}",
        f"Website: {record.get('website', 'N/A')}",
        f"Status: {record.get('status', 'N/A')}",
        f"Link: {record.get('link', '')}",
        f"Lifecycle: {record.get('lifecycle', '')}",
        f"Datasheet: {record.get('datasheet', '')}",
    ]
    if record.get('error'):
        lines.append(f"Error: {record['error']}")
    lines.append("")
    return "\n".join(lines)


def log_run_results(event: Dict[str, Any], log_dir: Optional[str] = None) -> List[str]:
    """
    Log a finished run to a .txt file and a .json file

    Args:
        event: The processor's run_finished event
        log_dir: Target directory (defaults to get_log_directory())

    Returns:
        Paths of the files written, empty if writing failed
    """
    records = event.get('records', [])
    try:
        log_dir = log_dir or get_log_directory()
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        txt_path = os.path.join(log_dir, f"enrichment_{timestamp}.txt")
        json_path = os.path.join(log_dir, f"enrichment_{timestamp}.json")

        with open(txt_path, 'w', encoding='utf-8') as f:
            # Header
            f.write("=" * 80 + "\n")
            f.write("Part Enrichment Run Log\n")
            f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write("=" * 80 + "\n\n")

            # Summary
            f.write("SUMMARY\n")
            f.write("-" * 80 + "\n")
            f.write(f"Total Rows: {event.get('total', len(records))}\n")
            f.write(f"Completed: {event.get('completed', 0)}\n")
            f.write(f"Failed: {event.get('failed', 0)}\n")
            f.write(f"Pending: {event.get('pending', 0)}\n")
            f.write(f"Stopped Early: {'Yes' if event.get('stopped') else 'No'}\n")
            f.write("\n" + "=" * 80 + "\n\n")

            f.write("DETAILED RESULTS\n")
            f.write("-" * 80 + "\n\n")
            for idx, record in enumerate(records, 1):
                f.write(format_record(idx, record))
                f.write("\n")

        log_data = {
            "metadata": {
                "generated": datetime.now().isoformat(),
                "total": event.get('total', len(records)),
                "completed": event.get('completed', 0),
                "failed": event.get('failed', 0),
                "pending": event.get('pending', 0),
                "stopped": bool(event.get('stopped')),
            },
            "records": records,
        }
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)

        logger.info("run_log_written", path=txt_path)
        return [txt_path, json_path]

    except OSError as e:
        logger.error("run_log_failed", error=str(e))
        return []


def run_log_subscriber(event: Dict[str, Any]) -> None:
    """Processor subscriber that writes a log for every finished run"""
    if event.get('type') == 'run_finished':
        log_run_results(event)
