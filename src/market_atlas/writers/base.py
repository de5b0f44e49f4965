"""Base classes for data writers."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BaseWriter(ABC):
    """Abstract base class for all export writers."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def write(self, data: Any, destination: str) -> Path:
        """Write data to the specified destination and return the file path."""
