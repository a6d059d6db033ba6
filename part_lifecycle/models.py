"""
Data models for imported parts and their enrichment results
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .config import NOT_FOUND, PENDING

ENRICHMENT_FIELDS = ('link', 'lifecycle', 'datasheet')


class RowStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (RowStatus.COMPLETED, RowStatus.FAILED)


class RunState(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'


@dataclass(frozen=True)
class PartRecord:
    """One valid input row: a part number and the website to search it on"""
    part: str
    website: str


@dataclass(frozen=True)
class EnrichmentResult:
    """
    Outcome of a single lookup. A result with ``error`` set is a failed
    lookup; its fields are all the "Not found" sentinel.
    """
    link: str
    lifecycle: str
    datasheet: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def not_found(cls, error: Optional[str] = None) -> 'EnrichmentResult':
        return cls(link=NOT_FOUND, lifecycle=NOT_FOUND, datasheet=NOT_FOUND, error=error)

    @classmethod
    def from_dict(cls, data: Any) -> 'EnrichmentResult':
        """
        Build a result from the decoded model response

        Raises:
            ValueError: if a field is missing or is not a string
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        values = {}
        for field_name in ENRICHMENT_FIELDS:
            value = data.get(field_name)
            if not isinstance(value, str):
                raise ValueError(f"Field '{field_name}' is missing or not a string")
            values[field_name] = value.strip() or NOT_FOUND

        return cls(**values)


@dataclass
class EnrichedRecord:
    """A PartRecord plus its enrichment fields and processing status"""
    part: str
    website: str
    link: str = PENDING
    lifecycle: str = PENDING
    datasheet: str = PENDING
    status: RowStatus = RowStatus.PENDING
    error_detail: Optional[str] = None

    @classmethod
    def from_part(cls, record: PartRecord) -> 'EnrichedRecord':
        return cls(part=record.part, website=record.website)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'part': self.part,
            'website': self.website,
            'link': self.link,
            'lifecycle': self.lifecycle,
            'datasheet': self.datasheet,
            'status': self.status.value,
            'error': self.error_detail,
        }


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.current / self.total * 100)

    def to_dict(self) -> Dict[str, int]:
        return {'current': self.current, 'total': self.total, 'percent': self.percent}
