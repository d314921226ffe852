from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Parser(ABC):
    """Parser interface for turning external descriptions into deferred nodes."""

    @abstractmethod
    def parse(self, source: Any) -> Any:
        """Convert the given source into a runnable program."""
        raise NotImplementedError
