"""Curated CKD food dataset loading."""

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx
import pandas as pd

from ckd_food_panel.domain.dataset import DatasetRecord

PACKAGED_DATASET_PATH = (
    Path(__file__).resolve().parents[1] / "data" / "ckd_foods_master.csv"
)

_TEXT_COLUMNS = (
    "source",
    "name_local",
    "name_en",
    "lang",
    "category",
    "serving_basis",
    "notes",
)
_NUMERIC_COLUMNS = ("protein_g", "phosphorus_mg", "potassium_mg", "sodium_mg")


class DatasetProvider(Protocol):
    """Interface for loading the curated dataset."""

    async def load(self) -> list[DatasetRecord]:
        """Return every dataset record in file order."""


@dataclass
class PandasDatasetProvider(DatasetProvider):
    """Reads the dataset CSV from a filesystem path or an http(s) URL."""

    location: str
    http_client: httpx.AsyncClient | None = None
    timeout_seconds: float = 15

    async def load(self) -> list[DatasetRecord]:
        """Load and normalize all dataset rows."""
        if _is_url(self.location):
            text = await self._download()
            frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
        else:
            frame = await asyncio.to_thread(
                pd.read_csv,
                Path(self.location).expanduser(),
                dtype=str,
                keep_default_na=False,
                encoding="utf-8",
            )
        return records_from_frame(frame)

    async def _download(self) -> str:
        if self.http_client is None:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.location, timeout=self.timeout_seconds)
        else:
            response = await self.http_client.get(
                self.location, timeout=self.timeout_seconds
            )
        response.raise_for_status()
        return response.text


def records_from_frame(frame: pd.DataFrame) -> list[DatasetRecord]:
    """Convert a raw dataset frame into records, blank numbers as zero."""
    frame = frame.rename(columns=lambda column: str(column).strip())
    for column in _TEXT_COLUMNS:
        if column in frame.columns:
            frame[column] = frame[column].fillna("").astype(str).str.strip()
        else:
            frame[column] = ""
    for column in _NUMERIC_COLUMNS:
        if column in frame.columns:
            frame[column] = pd.to_numeric(frame[column], errors="coerce").fillna(0.0)
        else:
            frame[column] = 0.0

    return [
        DatasetRecord(
            source=row["source"],
            localized_name=row["name_local"],
            english_name=row["name_en"],
            language=row["lang"],
            category=row["category"],
            protein=float(row["protein_g"]),
            phosphorus=float(row["phosphorus_mg"]),
            potassium=float(row["potassium_mg"]),
            sodium=float(row["sodium_mg"]),
            notes=row["notes"] or None,
            serving_basis=row["serving_basis"] or None,
        )
        for row in frame.to_dict(orient="records")
    ]


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))
