"""
base.py — Streaming State Detector Contract
============================================

Every detector that consumes a sample stream and exposes a discrete
state implements this contract, so pipelines and the HTTP service can
drive any of them the same way.

Shared bookkeeping (dimensionality, trained flag) is held in a
`ModelInfo` record that detectors own, rather than in base-class code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .utils import is_dimension


@dataclass
class ModelInfo:
    """
    Bookkeeping common to all streaming detectors.

    Attributes:
        num_dimensions (int): Values per sample; 0 when unconfigured.
        trained (bool): Whether the detector can predict. Detectors that
            need no training are trained as soon as they are configured.
    """
    num_dimensions: int = 0
    trained: bool = False

    def configure(self, num_dimensions: int) -> bool:
        """Accept a positive integer dimensionality; anything else unconfigures."""
        if not is_dimension(num_dimensions):
            self.clear()
            return False
        self.num_dimensions = int(num_dimensions)
        self.trained = True
        return True

    def clear(self) -> None:
        self.num_dimensions = 0
        self.trained = False


class StreamingStateDetector(ABC):
    """Capability set shared by streaming state detectors."""

    info: ModelInfo

    @property
    def num_dimensions(self) -> int:
        return self.info.num_dimensions

    @property
    def is_trained(self) -> bool:
        return self.info.trained

    @abstractmethod
    def predict(self, sample) -> bool:
        """Consume one sample; False if it could not be processed."""

    @abstractmethod
    def reset(self) -> bool:
        """Reset runtime state, keeping configuration."""

    @abstractmethod
    def clear(self) -> bool:
        """Reset and drop configuration."""

    @property
    @abstractmethod
    def state(self) -> int:
        """Current discrete state."""

    @abstractmethod
    def save_model(self, path: str = None) -> bool:
        """Persist the detector to `path`."""

    @abstractmethod
    def load_model(self, path: str = None) -> bool:
        """Replace this detector with the one stored at `path`."""
