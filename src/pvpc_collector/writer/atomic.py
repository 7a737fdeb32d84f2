from __future__ import annotations

import logging
import uuid
from pathlib import Path

import polars as pl

logger = logging.getLogger(__name__)


class AtomicParquetWriter:
    """Writes sample frames so readers never observe a half-written file."""

    def __init__(self, root_dir: Path) -> None:
        self._root_dir = root_dir

    def write(self, frame: pl.DataFrame, destination: Path, append: bool = False) -> Path:
        final_path = destination if destination.is_absolute() else self._root_dir / destination
        final_path.parent.mkdir(parents=True, exist_ok=True)

        effective_frame = frame
        if append and final_path.exists():
            existing_frame = pl.read_parquet(final_path)
            effective_frame = self._merge_frames(existing_frame=existing_frame, new_frame=frame)

        tmp_dir = final_path.parent / ".tmp"
        tmp_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = tmp_dir / f"{uuid.uuid4().hex}.parquet"

        effective_frame.write_parquet(tmp_path, compression="zstd", statistics=True)
        tmp_path.replace(final_path)
        logger.info("wrote samples", extra={"path": str(final_path), "rows": effective_frame.height})
        return final_path

    @staticmethod
    def _merge_frames(existing_frame: pl.DataFrame, new_frame: pl.DataFrame) -> pl.DataFrame:
        keys = [column for column in new_frame.columns if new_frame.schema[column] != pl.Float64]
        merged = pl.concat([existing_frame, new_frame], how="diagonal_relaxed")
        return merged.unique(subset=keys, keep="last", maintain_order=True).sort("timestamp")
