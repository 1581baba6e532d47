"""
File Scanner Module
Collects the PDF files to orient from files and folders given on the command line
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import OUTPUT_FOLDER_NAME


class FileScanner:
    """Scans directories for PDF documents"""

    SUPPORTED_EXTENSIONS = {'.pdf'}
    SKIPPED_DIRECTORIES = {'__pycache__', 'node_modules', '.git', OUTPUT_FOLDER_NAME.lower()}

    def __init__(self, log_callback=None):
        """
        Initialize the file scanner

        Args:
            log_callback: Optional callback function for logging messages
        """
        self.log_callback = log_callback
        self.scanned_count = 0

    def log(self, message):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def is_supported(self, file_path: Path) -> bool:
        # Skip editor lock files and hidden files
        if file_path.name.startswith('~') or file_path.name.startswith('.'):
            return False
        return file_path.suffix.lower() in self.SUPPORTED_EXTENSIONS

    def scan_directory(self, directory_path) -> List[Path]:
        """
        Scan a directory and all subdirectories for PDF files

        Args:
            directory_path: Path to the directory to scan

        Returns:
            list: PDF paths sorted by relative path, case-insensitively
        """
        directory = Path(directory_path)

        if not directory.is_dir():
            self.log(f"Error: '{directory_path}' is not a directory")
            return []

        self.log(f"Scanning directory: {directory_path}")
        found = []

        for root, dirs, files in os.walk(directory):
            dirs[:] = [d for d in dirs if not d.startswith('.') and
                       d.lower() not in self.SKIPPED_DIRECTORIES]

            for file in files:
                self.scanned_count += 1
                file_path = Path(root) / file
                if self.is_supported(file_path):
                    found.append(file_path)

        found.sort(key=lambda p: str(p.relative_to(directory)).lower())
        self.log(f"Found {len(found)} PDF files in {directory_path}")
        return found

    def plan_jobs(self, inputs: Iterable, output_folder: Optional[Path] = None) -> List[Tuple[Path, Path]]:
        """
        Pair every input PDF with its output path

        Files found in a folder keep their relative path under the output
        folder. Without an output folder, results go to an ORIENTED_FILES
        folder next to each input.

        Returns:
            list: (source_path, output_path) tuples
        """
        jobs = []
        for item in inputs:
            path = Path(item)
            if path.is_dir():
                target_root = Path(output_folder) if output_folder else path / OUTPUT_FOLDER_NAME
                for pdf_path in self.scan_directory(path):
                    jobs.append((pdf_path, target_root / pdf_path.relative_to(path)))
            else:
                target_root = Path(output_folder) if output_folder else path.parent / OUTPUT_FOLDER_NAME
                if path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
                    self.log(f"Skipping non-PDF input: {path}")
                    continue
                jobs.append((path, target_root / path.name))
        return jobs
