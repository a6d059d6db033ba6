"""
Configuration - environment settings, enrichment prompt and logging setup
"""
import logging
import os
import sys

import structlog
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Enrichment backend: "openai" or "azure"
ENRICHMENT_BACKEND = os.getenv('ENRICHMENT_BACKEND', 'openai').strip().lower()

# OpenAI Responses API
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4.1')  # or "gpt-4.1-mini"
OPENAI_MAX_OUTPUT_TOKENS = int(os.getenv('OPENAI_MAX_OUTPUT_TOKENS', '1024'))
OPENAI_TEMPERATURE = float(os.getenv('OPENAI_TEMPERATURE', '0.2'))

# Azure AI Foundry agent
AZURE_AI_API_ENDPOINT = os.getenv('AZURE_AI_API_ENDPOINT', '')
AZURE_AI_AGENT = os.getenv('AZURE_AI_AGENT', '')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Run log files written when a run finishes
RUN_LOG_ENABLED = _env_flag('RUN_LOG_ENABLED', True)
RUN_LOG_DIR = os.getenv('RUN_LOG_DIR', '')

MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', '16'))

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '5000'))

ALLOWED_EXTENSIONS = ('.xlsx', '.xls')

# Sentinels stored in enrichment fields
PENDING = 'Pending'
NOT_FOUND = 'Not found'

# Generic per-row error tag; the underlying cause only goes to the log
ROW_ERROR_DETAIL = 'API Error'

EXPORT_COLUMNS = ['Part', 'Website', 'Link', 'Lifecycle', 'Datasheet']

ENRICHMENT_INSTRUCTIONS = """You research electronic components on distributor and manufacturer websites.
Use web search to look up the requested part on the requested website.
Never invent URLs. Only report a link or a status you actually found.
Answer with a single JSON object and nothing else."""

ENRICHMENT_PROMPT = """Find information for the electronic component part number "{part}" on the website "{website}".

You must find:
1. The direct product page URL on {website}.
2. The current lifecycle status (e.g., Active, Obsolete, NRND, EOL). If not explicitly found, look for "In Stock" or "Discontinued" cues.
3. The direct URL to the technical datasheet for this specific part.

If any information is not found, use "Not found" as the value.
Return the result strictly in JSON format with exactly these fields: "link", "lifecycle", "datasheet"."""

ENRICHMENT_SCHEMA = {
    "type": "object",
    "properties": {
        "link": {
            "type": "string",
            "description": "The product page URL address link. Use 'Not found' if unavailable.",
        },
        "lifecycle": {
            "type": "string",
            "description": "The lifecycle status word found on the page. Use 'Not found' if unavailable.",
        },
        "datasheet": {
            "type": "string",
            "description": "The datasheet URL address link. Use 'Not found' if unavailable.",
        },
    },
    "required": ["link", "lifecycle", "datasheet"],
    "additionalProperties": False,
}


def get_base_dir() -> str:
    if getattr(sys, 'frozen', False):
        # Running as compiled exe
        return os.path.dirname(sys.executable)
    # Running as script
    return os.path.dirname(os.path.abspath(__file__))


def configure_logging(log_level: str = LOG_LEVEL) -> None:
    """Configure structlog for JSON logging."""
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level.upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
