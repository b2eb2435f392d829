"""
Sample readers: load recorded location fixes from CSV or JSON-lines files.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence

from pydantic import ValidationError

from trackgate.analysis.types import LocationSample
from trackgate.utils.log import get_logger
from trackgate.utils.validate import SampleIn

logger = get_logger(__name__)

# (canonical column, accepted header names)
REQUIRED_COLUMNS = (
    ("lat", ("lat",)),
    ("lng", ("lng", "lon")),
    ("accuracy", ("accuracy",)),
    ("timestamp_ms", ("timestamp_ms", "timestamp")),
)


@dataclass
class ParseSummary:
    """
    Row counts for one parsed file.
    """
    rows_total: int = 0
    rows_parsed: int = 0
    fieldnames: Sequence[str] = field(default_factory=tuple)

    @property
    def rows_skipped(self) -> int:
        return self.rows_total - self.rows_parsed


def _check_columns(fieldnames: Sequence[str]) -> None:
    for canonical, names in REQUIRED_COLUMNS:
        if not any(n in fieldnames for n in names):
            raise KeyError(f"missing column {canonical!r}; file has {list(fieldnames)}")


def iter_samples_csv(path: str | Path, summary: ParseSummary | None = None) -> Iterator[LocationSample]:
    """
    Yield samples from a CSV file with a header row.

    Rows that do not validate are skipped and counted in `summary`.
    """
    summary = summary if summary is not None else ParseSummary()
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return
        summary.fieldnames = tuple(reader.fieldnames)
        _check_columns(reader.fieldnames)
        for row in reader:
            summary.rows_total += 1
            try:
                sample = SampleIn.model_validate(row).to_sample()
            except ValidationError as exc:
                logger.debug("Skipping CSV row %d: %s", summary.rows_total, exc)
                continue
            summary.rows_parsed += 1
            yield sample


def iter_samples_jsonl(path: str | Path, summary: ParseSummary | None = None) -> Iterator[LocationSample]:
    """
    Yield samples from a JSON-lines file (one object per line, blank lines ignored).
    """
    summary = summary if summary is not None else ParseSummary()
    with Path(path).open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            summary.rows_total += 1
            try:
                sample = SampleIn.model_validate(json.loads(line)).to_sample()
            except (ValueError, ValidationError) as exc:
                logger.debug("Skipping line %d: %s", lineno, exc)
                continue
            summary.rows_parsed += 1
            yield sample


def load_samples(path: str | Path) -> tuple[list[LocationSample], ParseSummary]:
    """
    Load every sample of a `.csv`, `.jsonl` or `.ndjson` file into memory.

    Returns
    -------
    (samples, summary)
    """
    p = Path(path)
    summary = ParseSummary()
    match p.suffix.lower():
        case ".csv":
            samples = list(iter_samples_csv(p, summary))
        case ".jsonl" | ".ndjson":
            samples = list(iter_samples_jsonl(p, summary))
        case other:
            raise ValueError(f"unsupported sample file type {other!r} ({p})")

    if summary.rows_skipped > 0:
        logger.warning("Skipped %d of %d rows in %s", summary.rows_skipped, summary.rows_total, p)
    return samples, summary
