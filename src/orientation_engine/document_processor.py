"""
Document Processor

Orients one document at a time: validate and load it, decide every page in
order, apply the decided rotations, then persist the whole document exactly
once. A BatchProcessor runs several documents through a bounded worker pool;
one failing document never stops the others.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import OrientationConfig
from .durable_writer import DurableWriter
from .error_handling import ErrorHandler, OrientationError, PersistenceError
from .models import DocumentResult
from .orchestrator import FallbackOrchestrator
from .pdf_document import PDFDocument
from .rotation_applier import RotationApplier


class DocumentProcessor:
    """Runs the orientation engine over single documents"""

    def __init__(self, config: OrientationConfig, orchestrator: Optional[FallbackOrchestrator] = None,
                 writer: Optional[DurableWriter] = None, error_handler: Optional[ErrorHandler] = None,
                 logger_manager=None, log_callback: Optional[Callable] = None):
        self.config = config
        self.logger_manager = logger_manager
        self.log_callback = log_callback or (logger_manager.log if logger_manager else None)

        self.orchestrator = orchestrator or FallbackOrchestrator(config, log_callback=self.log_callback)
        self.writer = writer or DurableWriter(log_callback=self.log_callback)
        self.error_handler = error_handler or ErrorHandler(log_callback=self.log_callback)

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def process_document(self, source_path, output_path) -> DocumentResult:
        """
        Orient one PDF and write the result

        Args:
            source_path: Input PDF
            output_path: Where the oriented PDF is written

        Returns:
            DocumentResult: success flag, per-page decisions, or the error that
            stopped this document
        """
        source_path = Path(source_path)
        output_path = Path(output_path)
        result = DocumentResult(source_path=source_path, output_path=output_path)
        start_time = time.time()

        try:
            self.log(f"🔍 Processing: {source_path.name}")
            self.error_handler.validate_source_file(source_path)
            document = PDFDocument.open(source_path)

            with document:
                self.log(f"   Document has {document.page_count} pages")
                applier = RotationApplier(log_callback=self.log_callback)

                for page in document.pages:
                    decision = self.orchestrator.decide_page(page, document.name)
                    decision.changed = applier.set_absolute(page, decision.verdict.angle)
                    result.pages.append(decision)

                # No page may be persisted before every page is decided
                undecided = [d.page_number for d in result.pages if not d.verdict.decided]
                if undecided:
                    raise OrientationError(f"Pages left undecided: {undecided}")

                if document.modified:
                    output_bytes = document.to_bytes()
                else:
                    self.log("   ✔ All pages already properly oriented")
                    output_bytes = document.original_bytes

            self.error_handler.validate_output_folder(output_path.parent)
            self.writer.save(output_bytes, output_path, self.config.retry_policy)

            result.success = True
            self.log(f"✅ Saved: {output_path}")

        except PersistenceError as e:
            result.error = str(e)
            self.log(f"❌ {e}")
            for tip in e.tips:
                self.log(f"   Tip: {tip}")

        except OrientationError as e:
            result.error = str(e)
            self.log(f"❌ {e}")

        except Exception as e:
            result.error = f"Unexpected error: {e}"
            self.log(f"❌ Failed to process {source_path.name}: {e}")

        result.processing_time = time.time() - start_time
        if self.logger_manager:
            self.logger_manager.log_document_result(result)
        return result


class BatchProcessor:
    """Runs many documents with bounded, document-level concurrency"""

    def __init__(self, processor: DocumentProcessor, worker_pool_size: Optional[int] = None):
        self.processor = processor
        self.worker_pool_size = worker_pool_size or processor.config.worker_pool_size

    def process_all(self, jobs: Sequence[Tuple[Path, Path]]) -> List[DocumentResult]:
        """
        Process (source, output) pairs; results come back in job order

        Pages inside a document stay sequential; only whole documents run in
        parallel.
        """
        if not jobs:
            self.processor.log("No PDF files found to process")
            return []

        self.processor.log(f"📁 {len(jobs)} documents to process with {self.worker_pool_size} workers")
        with ThreadPoolExecutor(max_workers=self.worker_pool_size,
                                thread_name_prefix="orient-doc") as executor:
            results = list(executor.map(lambda job: self.processor.process_document(*job), jobs))

        processed = sum(1 for result in results if result.success)
        self.processor.log(f"📊 Progress: {processed}/{len(jobs)} documents processed")
        return results
