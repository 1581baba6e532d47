"""
Logger Manager Module
Manages session logging for orientation runs: a timestamped log callback,
optional file logging, and a JSON log plus summary report at the end
"""

import json
import logging
import threading
from collections import Counter
from datetime import datetime
from pathlib import Path


class LoggerManager:
    """Manages logging for document orientation runs"""

    def __init__(self, log_directory=None, log_callback=None):
        """
        Initialize the logger manager

        Args:
            log_directory (str): Directory for log files (optional)
            log_callback: Optional callback function for real-time logging
        """
        self.log_callback = log_callback
        self.log_directory = log_directory
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._lock = threading.Lock()

        self.processing_log = {
            'session_id': self.session_id,
            'start_time': datetime.now().isoformat(),
            'inputs': [],
            'settings': {},
            'documents_processed': [],
            'processing_errors': [],
            'statistics': {}
        }

        if self.log_directory:
            self.setup_file_logging()

    def log(self, message, level='INFO'):
        """Log a message with timestamp"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        formatted_message = f"[{timestamp}] [{level}] {message}"

        if self.log_callback:
            self.log_callback(formatted_message)
        else:
            print(formatted_message)

        if hasattr(self, 'file_logger'):
            self.file_logger.log(getattr(logging, level, logging.INFO), message)

    def setup_file_logging(self):
        """Set up file-based logging"""
        log_dir = Path(self.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_path = log_dir / f"orientation_{self.session_id}.log"

        self.file_logger = logging.getLogger(f'OrientationEngine_{self.session_id}')
        self.file_logger.setLevel(logging.DEBUG)
        self.file_logger.propagate = False

        for handler in self.file_logger.handlers[:]:
            self.file_logger.removeHandler(handler)

        file_handler = logging.FileHandler(str(log_path), encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        self.file_logger.addHandler(file_handler)

        self.log(f"File logging initialized: {log_path}")

    def close(self):
        """Release the log file handle"""
        if hasattr(self, 'file_logger'):
            for handler in self.file_logger.handlers[:]:
                handler.close()
                self.file_logger.removeHandler(handler)

    def start_session(self, inputs, config):
        """Record what this run was asked to do"""
        policy = config.retry_policy
        self.processing_log['inputs'] = [str(item) for item in inputs]
        self.processing_log['settings'] = {
            'markers': list(config.markers),
            'min_text_length': config.min_text_length,
            'ocr_confidence_threshold': config.ocr_confidence_threshold,
            'normal_score_threshold': config.normal_score_threshold,
            'retry_max_attempts': policy.max_attempts,
            'retry_delay': policy.delay,
            'worker_pool_size': config.worker_pool_size,
            'use_aspect_ratio_signal': config.use_aspect_ratio_signal,
        }
        self.processing_log['start_time'] = datetime.now().isoformat()

        self.log(f"Starting orientation session: {self.session_id}")
        self.log(f"Inputs: {', '.join(self.processing_log['inputs'])}")
        self.log(f"Workers: {config.worker_pool_size}, markers: {len(config.markers)}")

    def log_document_result(self, result):
        """Record the outcome of one document (thread-safe)"""
        entry = result.to_dict()
        entry['timestamp'] = datetime.now().isoformat()

        with self._lock:
            if result.success:
                self.processing_log['documents_processed'].append(entry)
            else:
                self.processing_log['processing_errors'].append(entry)

        name = Path(result.source_path).name
        if result.success:
            rotated = sum(1 for decision in result.pages if decision.changed)
            self.log(f"Processed: {name} - {len(result.pages)} pages, {rotated} rotated")
        else:
            self.log(f"Processing error: {name} - {result.error}", 'ERROR')

    def finalize_session(self):
        """Finalize the session and compute statistics"""
        with self._lock:
            processed = list(self.processing_log['documents_processed'])
            failed = list(self.processing_log['processing_errors'])

        sources = Counter()
        pages_total = 0
        pages_rotated = 0
        for entry in processed:
            for page in entry['pages']:
                pages_total += 1
                pages_rotated += 1 if page['changed'] else 0
                sources[page['source']] += 1

        total = len(processed) + len(failed)
        stats = {
            'total_documents': total,
            'documents_processed': len(processed),
            'documents_failed': len(failed),
            'pages_decided': pages_total,
            'pages_rotated': pages_rotated,
            'decisions_by_source': dict(sources),
            'success_rate': (len(processed) / total) * 100 if total else 0,
        }
        self.processing_log['statistics'] = stats
        self.processing_log['end_time'] = datetime.now().isoformat()

        self.log("=== ORIENTATION COMPLETE ===")
        self.log(f"Documents processed: {stats['documents_processed']}/{total}")
        self.log(f"Documents failed: {stats['documents_failed']}")
        self.log(f"Pages decided: {pages_total} ({pages_rotated} rotated)")
        for source, count in sorted(sources.items()):
            self.log(f"  {source}: {count} pages")
        self.log(f"Success rate: {stats['success_rate']:.1f}%")

        return stats

    def save_log_file(self, output_directory):
        """Save the session log in JSON format"""
        if not output_directory:
            return None

        log_dir = Path(output_directory)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"orientation_log_{self.session_id}.json"

        try:
            with open(log_path, 'w', encoding='utf-8') as f:
                json.dump(self.processing_log, f, indent=2, ensure_ascii=False)
            self.log(f"Log file saved: {log_path}")
            return str(log_path)
        except OSError as e:
            self.log(f"Error saving log file: {e}", 'ERROR')
            return None

    def create_summary_report(self, output_directory):
        """Create a human-readable summary report"""
        if not output_directory:
            return None

        log_dir = Path(output_directory)
        log_dir.mkdir(parents=True, exist_ok=True)
        report_path = log_dir / f"orientation_summary_{self.session_id}.txt"
        stats = self.processing_log.get('statistics', {})

        try:
            with open(report_path, 'w', encoding='utf-8') as f:
                f.write("PAGE ORIENTATION REPORT\n")
                f.write("=" * 50 + "\n\n")
                f.write(f"Date/Time: {self.processing_log['start_time'][:19].replace('T', ' ')}\n")
                f.write(f"Inputs: {', '.join(self.processing_log['inputs'])}\n\n")

                f.write("SUMMARY\n")
                f.write("-" * 25 + "\n")
                f.write(f"Documents Found: {stats.get('total_documents', 0)}\n")
                f.write(f"Documents Processed: {stats.get('documents_processed', 0)}\n")
                f.write(f"Documents with Errors: {stats.get('documents_failed', 0)}\n")
                f.write(f"Pages Rotated: {stats.get('pages_rotated', 0)} "
                        f"of {stats.get('pages_decided', 0)}\n\n")

                if self.processing_log['processing_errors']:
                    f.write("PROCESSING ERRORS\n")
                    f.write("-" * 18 + "\n")
                    for entry in self.processing_log['processing_errors']:
                        f.write(f"  {entry['source']} - {entry['error']}\n")
                    f.write("\n")

                if self.processing_log['documents_processed']:
                    f.write("ORIENTED DOCUMENTS\n")
                    f.write("-" * 30 + "\n")
                    for entry in self.processing_log['documents_processed']:
                        f.write(f"  {Path(entry['source']).name} → {entry['output']}\n")
                        for page in entry['pages']:
                            marker = "rotated" if page['changed'] else "unchanged"
                            f.write(f"    Page {page['page']}: {page['rotation']}° "
                                    f"({page['source']}, {marker})\n")
                    f.write("\n")

            self.log(f"Summary report saved: {report_path}")
            return str(report_path)

        except OSError as e:
            self.log(f"Error creating summary report: {e}", 'ERROR')
            return None
