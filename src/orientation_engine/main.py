#!/usr/bin/env python3
"""
Orientation Engine command line

Orients every page of the given PDFs (files or folders) and writes the
corrected documents to an output folder.

Exit status: 0 when every document was written, 1 when any document failed,
2 on a configuration error.
"""

import argparse
import sys
from pathlib import Path

from .config import OrientationConfig, RetryPolicy, load_config
from .document_processor import BatchProcessor, DocumentProcessor
from .error_handling import ConfigurationError
from .extractors import OCRExtractor, TesseractEngine
from .file_scanner import FileScanner
from .logger_manager import LoggerManager
from .manual_prompt import PromptChannel, console_prompt, fixed_answer
from .models import CANONICAL_ANGLES
from .orchestrator import FallbackOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orient-pdfs",
        description="Detect and fix rotated or upside-down PDF pages"
    )
    parser.add_argument('inputs', nargs='+',
                        help='PDF files or folders to process')
    parser.add_argument('--output', '-o', dest='output_folder', default=None,
                        help='Output folder (default: ORIENTED_FILES next to each input)')
    parser.add_argument('--config', '-c', dest='config_path', default=None,
                        help='JSON configuration file')

    manual = parser.add_mutually_exclusive_group()
    manual.add_argument('--interactive', '-i', action='store_true',
                        help='Ask on the console when no signal decides a page')
    manual.add_argument('--manual-angle', type=int, choices=CANONICAL_ANGLES, default=0,
                        help='Rotation used when no signal decides a page (default: 0)')

    parser.add_argument('--workers', '-w', type=int, default=None,
                        help='Documents processed in parallel')
    parser.add_argument('--min-text-length', type=int, default=None,
                        help='Characters of text needed before classifying')
    parser.add_argument('--ocr-threshold', type=float, default=None,
                        help='OCR confidence (0-100) a result must exceed')
    parser.add_argument('--ocr-timeout', type=float, default=None,
                        help='Seconds allowed for rasterizing or OCR of one page')
    parser.add_argument('--retries', type=int, default=None,
                        help='Write attempts when the output file is busy')
    parser.add_argument('--retry-delay', type=float, default=None,
                        help='Seconds between write attempts')
    parser.add_argument('--aspect-ratio', action='store_true',
                        help='Turn landscape pages to 270° when text signals are inconclusive')
    parser.add_argument('--tesseract-cmd', default=None,
                        help='Path to the tesseract executable')
    parser.add_argument('--log-dir', default=None,
                        help='Folder for the log file, JSON session log and summary report')
    return parser


def build_config(args) -> OrientationConfig:
    """Merge the config file (if any) with command line overrides and validate"""
    config = load_config(args.config_path) if args.config_path else OrientationConfig()

    policy = config.retry_policy
    if args.retries is not None or args.retry_delay is not None:
        policy = RetryPolicy(
            max_attempts=args.retries if args.retries is not None else policy.max_attempts,
            delay=args.retry_delay if args.retry_delay is not None else policy.delay,
        )

    config = config.with_overrides(
        worker_pool_size=args.workers,
        min_text_length=args.min_text_length,
        ocr_confidence_threshold=args.ocr_threshold,
        ocr_timeout=args.ocr_timeout,
        tesseract_cmd=args.tesseract_cmd,
        use_aspect_ratio_signal=True if args.aspect_ratio else None,
        retry_policy=policy,
    )
    return config.validate()


def main(argv=None) -> int:
    """Main application entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger_manager = LoggerManager(log_directory=args.log_dir)
    log = logger_manager.log

    prompt_func = console_prompt if args.interactive else fixed_answer(args.manual_angle)
    prompt_channel = PromptChannel(prompt_func, log_callback=log)

    engine = TesseractEngine(config.tesseract_cmd, log_callback=log)
    orchestrator = FallbackOrchestrator(
        config,
        prompt_channel=prompt_channel,
        ocr=OCRExtractor(config, engine=engine, log_callback=log),
        log_callback=log,
    )
    processor = DocumentProcessor(config, orchestrator=orchestrator, logger_manager=logger_manager)

    try:
        logger_manager.start_session(args.inputs, config)
        output_folder = Path(args.output_folder) if args.output_folder else None
        jobs = FileScanner(log_callback=log).plan_jobs(args.inputs, output_folder)

        results = BatchProcessor(processor, config.worker_pool_size).process_all(jobs)

        logger_manager.finalize_session()
        if args.log_dir:
            logger_manager.save_log_file(args.log_dir)
            logger_manager.create_summary_report(args.log_dir)
    finally:
        logger_manager.close()

    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
