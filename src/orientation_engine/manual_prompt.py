"""
Manual rotation prompt

The last step of the fallback chain asks a person. The question is a plain
callable ``(message, choices) -> answer`` so automated runs can swap the
console for a fixed answer. One PromptChannel is shared by the whole run and
serializes access, so prompts from concurrently processed documents never
interleave.
"""

import threading
from typing import Callable, Sequence

from .models import CANONICAL_ANGLES

PromptFunc = Callable[[str, Sequence[str]], str]

DEFAULT_MANUAL_ANGLE = 0


def console_prompt(message: str, choices: Sequence[str]) -> str:
    """Ask on stdin; a closed stdin answers with an empty string"""
    try:
        return input(message)
    except EOFError:
        return ""


def fixed_answer(angle: int = DEFAULT_MANUAL_ANGLE) -> PromptFunc:
    """Non-interactive prompt that always answers ``angle``"""
    def _answer(message: str, choices: Sequence[str]) -> str:
        return str(angle)
    return _answer


def parse_angle(answer) -> int:
    """Map a prompt answer onto a canonical angle; anything else means 0°"""
    try:
        angle = int(str(answer).strip())
    except (TypeError, ValueError):
        return DEFAULT_MANUAL_ANGLE
    return angle if angle in CANONICAL_ANGLES else DEFAULT_MANUAL_ANGLE


class PromptChannel:
    """Shared, lock-guarded access to the interactive prompt"""

    def __init__(self, prompt_func: PromptFunc = None, log_callback=None):
        self.prompt_func = prompt_func or fixed_answer()
        self.log_callback = log_callback
        self._lock = threading.Lock()
        self.prompt_count = 0

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def ask_rotation(self, page_number: int, document_name: str = "") -> int:
        """
        Ask for the rotation of one page

        Args:
            page_number: 1-based page number shown to the operator
            document_name: Document the page belongs to

        Returns:
            int: chosen angle, 0 when the answer is not one of 0/90/180/270
        """
        choices = [str(angle) for angle in CANONICAL_ANGLES]
        prefix = f"[{document_name}] " if document_name else ""
        message = f"{prefix}Rotation for page {page_number} ({'/'.join(choices)}): "

        with self._lock:
            self.prompt_count += 1
            answer = self.prompt_func(message, choices)

        angle = parse_angle(answer)
        if str(answer).strip() != str(angle):
            self.log(f"   Answer {answer!r} is not one of {'/'.join(choices)}, using {angle}°")
        return angle
