"""Curated dataset domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DatasetRecord:
    """A row of the curated CKD food dataset, nutrients per 100 g."""

    source: str
    localized_name: str
    english_name: str
    language: str
    category: str
    protein: float
    phosphorus: float
    potassium: float
    sodium: float
    notes: str | None
    serving_basis: str | None = None
