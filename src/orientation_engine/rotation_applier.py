"""
Rotation Applier

The only component allowed to change a page's rotation. Two explicitly
separate operations:

* ``set_absolute`` sets the rotation to a target angle. Idempotent, so a
  re-run of the same decisions is harmless. The engine only uses this one.
* ``rotate_by`` adds a delta to whatever the page has now. Kept for legacy
  call sites that "rotate by 180"; applying it twice rotates twice, so it must
  be used at most once per page per run.
"""

import weakref

from .models import normalize_angle


class RotationApplier:
    """Writes page rotation, tracking which pages were touched in this run"""

    def __init__(self, log_callback=None):
        self.log_callback = log_callback
        # Page indexes per document; an entry goes away with its document
        self._relative_pages = weakref.WeakKeyDictionary()

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def set_absolute(self, page, angle: int) -> bool:
        """
        Set the page rotation to ``angle`` regardless of its current value

        Args:
            page (Page): Page to rotate
            angle: Target angle, any multiple of 90

        Returns:
            bool: True if the stored rotation changed
        """
        target = normalize_angle(angle)
        current = page.current_rotation
        if current == target:
            return False

        page.document.set_rotation(page.index, target)
        self.log(f"   Page {page.number}: rotation {current}° → {target}°")
        return True

    def rotate_by(self, page, delta: int) -> int:
        """
        Legacy relative rotation: add ``delta`` to the current rotation

        Returns:
            int: the new rotation
        """
        touched = self._relative_pages.setdefault(page.document, set())
        if page.index in touched:
            self.log(f"⚠️  Page {page.number} rotated relatively more than once in this run")
        touched.add(page.index)

        current = page.current_rotation
        target = normalize_angle(current + delta)
        page.document.set_rotation(page.index, target)
        self.log(f"   Page {page.number}: rotated by {delta}° ({current}° → {target}°)")
        return target
