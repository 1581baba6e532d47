"""
Durable Writer

Persists output bytes so the destination only ever holds the old content or
the complete new content. Bytes go to a temporary file next to the destination
and are moved into place with an atomic rename. A "resource busy" failure
(the destination open in a viewer, an antivirus scan, a sync client) is
retried with a fixed delay; any other failure is raised at once.
"""

import errno
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional

from .config import RetryPolicy
from .error_handling import PersistenceError, is_destination_locked, is_resource_busy


class DurableWriter:
    """All-or-nothing file writes with bounded retry on busy destinations"""

    def __init__(self, log_callback=None, sleep: Callable[[float], None] = time.sleep,
                 replace: Callable = os.replace):
        self.log_callback = log_callback
        self.logger = logging.getLogger(__name__)
        self._sleep = sleep
        self._replace = replace

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def save(self, data: bytes, destination, policy: Optional[RetryPolicy] = None) -> int:
        """
        Write ``data`` to ``destination``

        Args:
            data: Bytes to persist
            destination: Target file path
            policy: Retry policy for busy destinations

        Returns:
            int: number of write attempts it took

        Raises:
            PersistenceError: on a non-transient failure, or once every
                attempt allowed by the policy failed with "busy"
        """
        policy = policy or RetryPolicy()
        destination = Path(destination)
        last_error = None

        for attempt in range(1, policy.max_attempts + 1):
            try:
                self._write_once(data, destination)
                if attempt > 1:
                    self.log(f"   Saved {destination.name} on attempt {attempt}")
                return attempt

            except OSError as e:
                if not is_resource_busy(e):
                    self.logger.error(f"Write failed for {destination}: {e}")
                    raise PersistenceError(destination, e)

                last_error = e
                remaining = policy.max_attempts - attempt
                if remaining > 0:
                    self.log(f"⚠️  File busy, retrying in {policy.delay:.1f}s... "
                             f"({remaining} attempts remaining)")
                    self._sleep(policy.delay)

        self.logger.error(f"All {policy.max_attempts} write attempts failed for {destination}")
        raise PersistenceError(destination, last_error, attempts=policy.max_attempts, transient=True)

    def _write_once(self, data: bytes, destination: Path):
        """One attempt: full write to a temp file, then atomic rename"""
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{destination.stem}_", suffix=".tmp", dir=str(destination.parent)
        )
        try:
            with os.fdopen(fd, 'wb') as temp_file:
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            try:
                self._replace(temp_path, str(destination))
            except OSError as e:
                if is_destination_locked(e, destination):
                    raise OSError(errno.EBUSY, f"{destination.name} is open in another program: {e}",
                                  str(destination)) from e
                raise
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError as cleanup_error:
                self.logger.warning(f"Could not remove temporary file {temp_path}: {cleanup_error}")
            raise
