"""
Batch Processing
================
Runs a list of uploaded bills through the reader and the extraction core,
one document at a time, reporting progress after each.

A document that cannot be decoded is recorded as an error and the batch
carries on with the next one.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

from .debug_log import DebugLog
from .document import DocumentReader, DocumentReadError
from .models import ExtractionResult
from .orchestrator import resolve

if TYPE_CHECKING:
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class BillRecord:
    """Extraction outcome for one file."""
    file_name: str
    provider_id: Optional[str]
    provider_name: Optional[str]
    result: ExtractionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "data": self.result.to_dict(),
        }


@dataclass(frozen=True)
class BatchError:
    file_name: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"file_name": self.file_name, "error": self.error}


@dataclass
class BatchReport:
    results: List[BillRecord] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)
    log_lines: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
            "logs": list(self.log_lines),
        }


class BatchProcessor:
    """
    Sequential bill processor.

    Args:
        reader: Object with ``read_bytes(data) -> DocumentText``
        registry: ProviderRegistry (default: the process-wide registry)
    """

    def __init__(self, reader: Optional[DocumentReader] = None, registry: Optional["ProviderRegistry"] = None):
        self.reader = reader or DocumentReader()
        self.registry = registry

    def process(
        self,
        documents: Sequence[Tuple[str, bytes]],
        preferred_provider_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
        log: Optional[DebugLog] = None,
    ) -> BatchReport:
        """
        Process ``(file_name, pdf_bytes)`` pairs in order.

        ``progress_callback(percent, file_name)`` fires after every document,
        whether it succeeded or not.
        """
        log = log if log is not None else DebugLog()
        report = BatchReport()
        total = len(documents)

        log(f"=== Starting batch processing of {total} file(s) ===")

        for i, (file_name, data) in enumerate(documents):
            log(f"--- Processing file {i + 1}/{total}: {file_name} ---")
            try:
                document = self.reader.read_bytes(data)
                log(f"Extraction complete! Total text length: {len(document.full_text)} characters")
                resolution = resolve(
                    document.full_text,
                    document.pages,
                    preferred_provider_id=preferred_provider_id,
                    registry=self.registry,
                    log_sink=log,
                )
                report.results.append(
                    BillRecord(file_name, resolution.provider_id, resolution.provider_name, resolution.result)
                )
                log(f"Successfully processed {file_name}")
            except DocumentReadError as e:
                logger.warning(f"Could not read {file_name}: {e}")
                log(f"ERROR processing {file_name}: {e}")
                report.errors.append(BatchError(file_name, str(e)))

            self._notify_progress(progress_callback, round((i + 1) / total * 100), file_name)

        log(f"=== Processing complete! Extracted {len(report.results)} files successfully ===")
        report.log_lines = list(log.lines)
        return report

    @staticmethod
    def _notify_progress(callback: Optional[ProgressCallback], percent: int, file_name: str) -> None:
        if callback is None:
            return
        try:
            callback(percent, file_name)
        except Exception as e:
            logger.warning(f"Progress callback error: {e}")

