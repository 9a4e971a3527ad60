"""Offering sources."""
from __future__ import annotations

from .base import OfferingSource
from .public_form import PublicFormSource, parse_public_form, read_public_form

__all__ = ["OfferingSource", "PublicFormSource", "parse_public_form", "read_public_form"]
