"""Structured entry extraction from located page sections."""

from .malaria import extract_malaria_info
from .risks import extract_risk_section
from .strategies import ExtractionContext, EntryKind, first_non_empty
from .vaccines import extract_vaccine_section

__all__ = [
    "EntryKind",
    "ExtractionContext",
    "extract_malaria_info",
    "extract_risk_section",
    "extract_vaccine_section",
    "first_non_empty",
]
