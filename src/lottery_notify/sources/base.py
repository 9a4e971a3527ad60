"""Base classes for loading public offering data."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Sequence

from ..models import PublicOfferingRecord


class OfferingSource(ABC):
    """Abstract source that can load the current public offerings."""

    def __init__(self, url: str) -> None:
        self.url = url

    @abstractmethod
    def fetch_offerings(self, today: date) -> Sequence[PublicOfferingRecord]:
        """Return eligible offerings ordered by draw date."""


__all__ = ["OfferingSource"]
