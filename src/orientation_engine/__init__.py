"""
Orientation Engine
Detects rotated and upside-down PDF pages and writes corrected documents.
"""

from .version import VERSION
from .config import OrientationConfig, RetryPolicy, load_config
from .classifier import OrientationClassifier
from .orchestrator import FallbackOrchestrator
from .rotation_applier import RotationApplier
from .durable_writer import DurableWriter
from .document_processor import BatchProcessor, DocumentProcessor
from .manual_prompt import PromptChannel, console_prompt, fixed_answer
from .models import ClassificationVerdict, Observation, PageState, SignalSource
from .pdf_document import PDFDocument

__version__ = VERSION

__all__ = [
    "OrientationConfig",
    "RetryPolicy",
    "load_config",
    "OrientationClassifier",
    "FallbackOrchestrator",
    "RotationApplier",
    "DurableWriter",
    "DocumentProcessor",
    "BatchProcessor",
    "PromptChannel",
    "console_prompt",
    "fixed_answer",
    "ClassificationVerdict",
    "Observation",
    "PageState",
    "SignalSource",
    "PDFDocument",
]
