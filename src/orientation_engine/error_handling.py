"""
Error handling utilities for the Orientation Engine.
Provides the exception taxonomy, transient-failure classification and
pre-flight validation of source files and output folders.
"""

import errno
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List

import psutil


# errno values that mean "someone else holds the file right now"
BUSY_ERRNOS = {errno.EBUSY, errno.ETXTBSY}

# Windows sharing / lock violations surface as PermissionError with these codes
BUSY_WINERRORS = {32, 33}

# A rename onto a file another program holds open fails with ERROR_ACCESS_DENIED
WINERROR_ACCESS_DENIED = 5

PERSISTENCE_TIPS = (
    "Close the output file if it is open in another program",
    "Try a different output filename",
    "Check file permissions in the output directory",
)


class OrientationError(Exception):
    """Base class for all engine errors"""
    pass


class ConfigurationError(OrientationError):
    """Raised when the engine configuration is invalid"""
    pass


class DocumentLoadError(OrientationError):
    """Raised when a source document cannot be read or parsed"""

    def __init__(self, path, reason):
        self.path = Path(path)
        self.reason = str(reason)
        super().__init__(f"Cannot load {self.path}: {self.reason}")


class ExtractionError(OrientationError):
    """Raised when a signal extractor cannot produce an observation"""
    pass


class PersistenceError(OrientationError):
    """Raised when output bytes cannot be written to their destination"""

    def __init__(self, path, cause, attempts=1, transient=False):
        self.path = Path(path)
        self.cause = cause
        self.attempts = attempts
        self.transient = transient
        self.tips = PERSISTENCE_TIPS if transient else ()
        if transient:
            message = f"Could not write {self.path} after {attempts} attempts (file busy): {cause}"
        else:
            message = f"Could not write {self.path}: {cause}"
        super().__init__(message)


def is_resource_busy(error: BaseException) -> bool:
    """Return True when an OS error means the file is busy or locked by another process"""
    if not isinstance(error, OSError):
        return False
    if error.errno in BUSY_ERRNOS:
        return True
    return getattr(error, 'winerror', None) in BUSY_WINERRORS


def is_destination_locked(error: BaseException, destination) -> bool:
    """
    Return True when a rename onto ``destination`` failed because another
    program holds the existing file open

    Windows reports this as ERROR_ACCESS_DENIED rather than a sharing
    violation. It only counts as "locked" when the destination is an existing
    file; access denied on anything else is a real permission problem.
    """
    if not isinstance(error, OSError):
        return False
    if getattr(error, 'winerror', None) != WINERROR_ACCESS_DENIED:
        return False
    return Path(destination).is_file()


class ErrorHandler:
    """Validation and cleanup helpers shared by the document processor"""

    def __init__(self, logger=None, log_callback=None):
        self.logger = logger or logging.getLogger(__name__)
        self.log_callback = log_callback

    def _warn(self, message: str):
        self.logger.warning(message)
        if self.log_callback:
            self.log_callback(f"⚠️  {message}")

    def validate_source_file(self, pdf_path: Path) -> int:
        """
        Validate that a source PDF exists and is readable before loading it

        Args:
            pdf_path: Path to the source PDF

        Returns:
            int: file size in bytes

        Raises:
            DocumentLoadError: if the file is missing, empty or unreadable
        """
        pdf_path = Path(pdf_path)

        if not pdf_path.exists():
            raise DocumentLoadError(pdf_path, "file does not exist")
        if not pdf_path.is_file():
            raise DocumentLoadError(pdf_path, "path is not a file")

        file_size = pdf_path.stat().st_size
        if file_size == 0:
            raise DocumentLoadError(pdf_path, "file is empty")

        # Check file accessibility
        try:
            with open(pdf_path, 'rb') as test_file:
                test_file.read(1)
        except OSError as e:
            raise DocumentLoadError(pdf_path, f"file is locked or inaccessible: {e}")

        for warning in self.check_system_resources(file_size / (1024 * 1024)):
            self._warn(warning)

        return file_size

    def check_system_resources(self, file_size_mb: float) -> List[str]:
        """Report memory pressure that could make a large document fail mid-run"""
        warnings = []
        memory = psutil.virtual_memory()
        available_memory_mb = memory.available / (1024 * 1024)

        # Rasterizing pages for OCR needs several times the file size
        required_memory_mb = file_size_mb * 3
        if available_memory_mb < required_memory_mb:
            warnings.append(
                f"Low memory: {available_memory_mb:.0f}MB available, "
                f"{required_memory_mb:.0f}MB recommended for {file_size_mb:.1f}MB file"
            )
        if memory.percent > 85:
            warnings.append(f"System memory usage high: {memory.percent:.1f}%")
        return warnings

    def validate_output_folder(self, output_folder: Path) -> None:
        """
        Create the output folder if needed and check it is writable

        Raises:
            PersistenceError: if the folder cannot be created or written
        """
        output_folder = Path(output_folder)
        if output_folder.exists() and not output_folder.is_dir():
            raise PersistenceError(output_folder, "output path exists but is not a directory")

        try:
            output_folder.mkdir(parents=True, exist_ok=True)
            # Unique name so concurrent documents can check the same folder
            with tempfile.NamedTemporaryFile(dir=str(output_folder), prefix=".write_test_"):
                pass
        except OSError as e:
            raise PersistenceError(output_folder, f"cannot write to output folder: {e}")

        free_mb = shutil.disk_usage(str(output_folder)).free / (1024 * 1024)
        if free_mb < 100:
            self._warn(f"Low disk space in output folder: {free_mb:.0f}MB free")

