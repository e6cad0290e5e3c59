from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd
import structlog

from ..models import Entity, EntityType
from .normalization import normalize_records


logger = structlog.get_logger(__name__)

CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}
SAMPLE_FILES = {
    EntityType.CLIENTS: "clients.csv",
    EntityType.WORKERS: "workers.csv",
    EntityType.TASKS: "tasks.csv",
}


class IngestionError(Exception):
    """Raised when an uploaded file cannot be read."""


class UnsupportedFileError(IngestionError):
    """Raised for file types other than CSV and Excel."""


def _frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    df = df.rename(columns=lambda c: str(c).strip())
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def parse_csv(content: bytes) -> List[Dict[str, Any]]:
    df = pd.read_csv(
        io.BytesIO(content),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )
    df = df[~(df.apply(lambda col: col.str.strip()) == "").all(axis=1)]
    return _frame_to_rows(df)


def parse_excel(content: bytes) -> List[Dict[str, Any]]:
    df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    return _frame_to_rows(df)


def parse_upload(file_name: str, content: bytes) -> List[Dict[str, Any]]:
    """Parse an uploaded CSV/Excel file into raw row dicts."""

    extension = Path(file_name).suffix.lower()
    if extension in CSV_EXTENSIONS:
        parser = parse_csv
    elif extension in EXCEL_EXTENSIONS:
        parser = parse_excel
    else:
        raise UnsupportedFileError(f"Unsupported file format: {extension or file_name}")

    try:
        rows = parser(content)
    except Exception as exc:  # noqa: BLE001
        raise IngestionError(f"Could not read {file_name}: {exc}") from exc
    logger.info("file_parsed", file_name=file_name, rows=len(rows))
    return rows


def ingest_file(file_name: str, content: bytes, entity_type: Union[EntityType, str]) -> List[Entity]:
    """Parse and normalize one upload."""

    entity_type = EntityType(entity_type)
    rows = parse_upload(file_name, content)
    return normalize_records(rows, entity_type)


def load_sample_data(samples_dir: Union[str, Path]) -> Dict[EntityType, List[Entity]]:
    """Load the bundled clients/workers/tasks CSV samples."""

    samples_dir = Path(samples_dir)
    data: Dict[EntityType, List[Entity]] = {}
    for entity_type, file_name in SAMPLE_FILES.items():
        path = samples_dir / file_name
        if not path.exists():
            raise IngestionError(f"Sample file not found: {path}")
        data[entity_type] = ingest_file(file_name, path.read_bytes(), entity_type)
    logger.info("samples_loaded", **{k.value: len(v) for k, v in data.items()})
    return data
