"""
Base class for page signal extractors
"""
from abc import ABC, abstractmethod

from ..config import OrientationConfig
from ..models import Observation, SignalSource


class BaseExtractor(ABC):
    """Base class for all signal extractors: turns a page into an Observation"""

    def __init__(self, config: OrientationConfig, log_callback=None):
        self.config = config
        self.log_callback = log_callback

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    @property
    @abstractmethod
    def source(self) -> SignalSource:
        """Return the signal source identifier"""
        pass

    @abstractmethod
    def extract(self, page) -> Observation:
        """
        Observe a page

        Args:
            page (Page): Page to observe

        Returns:
            Observation: what this strategy could tell about the page; an
            observation with no text and no suggested angle means
            "insufficient signal"
        """
        pass

    def empty_observation(self) -> Observation:
        return Observation(source=self.source)
