"""
Row Processor - Enriches loaded parts one at a time with per-row status,
cooperative stop and resume
"""
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog

from ..config import NOT_FOUND, ROW_ERROR_DETAIL
from ..exceptions import ParseError
from ..models import EnrichedRecord, EnrichmentResult, PartRecord, Progress, RowStatus, RunState
from .ai_service import EnrichmentClient

logger = structlog.get_logger(__name__)

Subscriber = Callable[[Dict[str, Any]], None]


class RowProcessor:
    """
    Owns the record collection and runs the enrichment loop over it.

    Only one loop is ever active. ``stop()`` only prevents the next row from
    starting; a call already sent to the enrichment client is allowed to
    finish. Starting again resumes at the first row that is not completed.
    """

    def __init__(self, enrichment_client: EnrichmentClient):
        self.enrichment_client = enrichment_client
        self._lock = threading.RLock()
        self._records: List[EnrichedRecord] = []
        self._run_state = RunState.IDLE
        self._cancel_event = threading.Event()
        self._progress = Progress()
        # Bumped by load/reset so a draining loop cannot write into a new collection
        self._generation = 0
        self._loop_active = False
        self._worker: Optional[threading.Thread] = None
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # Observers

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for processor events

        Returns:
            Function that removes the callback again
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: Dict[str, Any]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("subscriber_failed", event_type=event.get('type'))

    # ------------------------------------------------------------------
    # State

    @property
    def records(self) -> List[EnrichedRecord]:
        with self._lock:
            return list(self._records)

    @property
    def run_state(self) -> RunState:
        return self._run_state

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def is_running(self) -> bool:
        return self._run_state is RunState.RUNNING

    @property
    def is_draining(self) -> bool:
        """True after stop() while the last in-flight call has not returned"""
        with self._lock:
            return self._loop_active and self._run_state is RunState.IDLE

    @property
    def is_done(self) -> bool:
        """Every row has reached Completed or Failed"""
        with self._lock:
            return bool(self._records) and all(r.status.is_terminal for r in self._records)

    def _count(self, status: RowStatus) -> int:
        return sum(1 for r in self._records if r.status is status)

    def _summary(self) -> Dict[str, Any]:
        return {
            'total': len(self._records),
            'completed': self._count(RowStatus.COMPLETED),
            'failed': self._count(RowStatus.FAILED),
            'pending': self._count(RowStatus.PENDING),
        }

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'run_state': self._run_state.value,
                'draining': self._loop_active and self._run_state is RunState.IDLE,
                'progress': self._progress.to_dict(),
                'done': bool(self._records) and all(r.status.is_terminal for r in self._records),
                **self._summary(),
                'records': [r.to_dict() for r in self._records],
            }

    # ------------------------------------------------------------------
    # Commands

    def load(self, records: Iterable[PartRecord]) -> None:
        """
        Replace the collection with fresh Pending records

        Raises:
            ParseError: if ``records`` is empty
        """
        records = list(records)
        if not records:
            raise ParseError()

        with self._lock:
            self._cancel_event.set()
            self._cancel_event = threading.Event()
            self._generation += 1
            self._records = [EnrichedRecord.from_part(r) for r in records]
            self._run_state = RunState.IDLE
            self._progress = Progress(0, len(self._records))
            total = len(self._records)

        logger.info("records_loaded", total=total)
        self._notify({'type': 'loaded', 'total': total})

    def start(self, blocking: bool = False) -> bool:
        """
        Start a run over the current collection

        Args:
            blocking: Run the loop in the calling thread instead of a worker

        Returns:
            False when there is nothing to do or a loop is already active
        """
        with self._lock:
            if not self._records or self._loop_active:
                return False
            self._run_state = RunState.RUNNING
            self._loop_active = True
            self._cancel_event = threading.Event()
            self._progress = Progress(0, len(self._records))
            generation = self._generation
            cancel_event = self._cancel_event
            total = len(self._records)

        logger.info("run_started", total=total)
        self._notify({'type': 'run_started', 'total': total})

        if blocking:
            self._run(generation, cancel_event)
            return True

        self._worker = threading.Thread(
            target=self._run,
            args=(generation, cancel_event),
            name='row-processor',
            daemon=True,
        )
        self._worker.start()
        return True

    def stop(self) -> bool:
        """
        Ask the active run to stop before its next row

        Returns:
            False if no run was active
        """
        with self._lock:
            if self._run_state is not RunState.RUNNING:
                return False
            self._cancel_event.set()
            self._run_state = RunState.IDLE
            progress = self._progress

        logger.info("run_stop_requested", current=progress.current, total=progress.total)
        self._notify({'type': 'stopping', 'progress': progress.to_dict()})
        return True

    def reset(self) -> None:
        """Clear the collection and all progress"""
        with self._lock:
            self._cancel_event.set()
            self._cancel_event = threading.Event()
            self._generation += 1
            self._records = []
            self._run_state = RunState.IDLE
            self._progress = Progress()

        logger.info("records_reset")
        self._notify({'type': 'reset'})

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background loop to exit

        Returns:
            True if no loop is active any more
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
        with self._lock:
            return not self._loop_active

    # ------------------------------------------------------------------
    # Loop

    def _enrich(self, record: EnrichedRecord) -> EnrichmentResult:
        try:
            result = self.enrichment_client.enrich(record.part, record.website)
        except Exception as e:
            logger.warning("enrichment_raised", part=record.part, website=record.website, error=str(e))
            return EnrichmentResult.not_found(error=str(e))

        if not isinstance(result, EnrichmentResult):
            logger.warning("enrichment_malformed", part=record.part, website=record.website,
                           result_type=type(result).__name__)
            return EnrichmentResult.not_found(error="Malformed enrichment result")

        return result

    @staticmethod
    def _apply_result(record: EnrichedRecord, result: EnrichmentResult) -> None:
        if result.ok:
            record.link = result.link
            record.lifecycle = result.lifecycle
            record.datasheet = result.datasheet
            record.status = RowStatus.COMPLETED
            record.error_detail = None
        else:
            record.link = NOT_FOUND
            record.lifecycle = NOT_FOUND
            record.datasheet = NOT_FOUND
            record.status = RowStatus.FAILED
            record.error_detail = ROW_ERROR_DETAIL

    def _run(self, generation: int, cancel_event: threading.Event) -> None:
        with self._lock:
            records = self._records
        total = len(records)
        stopped = False

        try:
            for index, record in enumerate(records):
                if cancel_event.is_set():
                    stopped = True
                    break

                with self._lock:
                    if generation != self._generation:
                        stopped = True
                        break
                    skip = record.status is RowStatus.COMPLETED
                    if skip:
                        self._progress = Progress(index + 1, total)
                    else:
                        record.status = RowStatus.PROCESSING
                        self._progress = Progress(index, total)
                    row = record.to_dict()
                    progress = self._progress.to_dict()

                if not skip:
                    self._notify({'type': 'row', 'index': index, 'record': row})
                self._notify({'type': 'progress', **progress})
                if skip:
                    continue

                result = self._enrich(record)

                with self._lock:
                    if generation != self._generation:
                        stopped = True
                        break
                    self._apply_result(record, result)
                    self._progress = Progress(index + 1, total)
                    row = record.to_dict()
                    progress = self._progress.to_dict()

                self._notify({'type': 'row', 'index': index, 'record': row})
                self._notify({'type': 'progress', **progress})

        finally:
            with self._lock:
                self._loop_active = False
                current = generation == self._generation
                if current:
                    self._run_state = RunState.IDLE
                    summary = self._summary()
                    rows = [r.to_dict() for r in self._records]
                else:
                    summary = {}
                    rows = []

        if current:
            logger.info("run_finished", stopped=stopped, **summary)
            self._notify({'type': 'run_finished', 'stopped': stopped, **summary, 'records': rows})
