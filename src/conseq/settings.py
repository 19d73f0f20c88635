"""Persist a single settings record to a Conseq text file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from conseq.records import deserialize_record, resolve_record_target, serialize_record
from conseq.registry import ShapeRegistry
from conseq.types import ConseqFormat, RecordShape

logger = logging.getLogger(__name__)


class SettingsFile:
    """A settings record stored in one file.

    Loading a file that does not exist yet returns a default record, so a
    fresh install needs no setup step.
    """

    def __init__(
        self,
        path: Path | str,
        record_type: type | RecordShape,
        fmt: ConseqFormat = ConseqFormat.READABLE,
        registry: ShapeRegistry | None = None,
    ) -> None:
        """Initialize a settings file.

        Args:
            path: Location of the file.
            record_type: Record class (or shape) stored in the file.
            fmt: Layout used by ``save``.
            registry: Registry to derive the record shape from.

        Raises:
            MissingTarget: If ``record_type`` is not a record type.
        """
        if isinstance(path, str):
            path = Path(path)
        self.path = path
        self.shape = resolve_record_target(record_type, registry)
        self.fmt = fmt

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Any:
        """Read the record from the file, or return a default record if it is missing."""
        if not self.path.exists():
            logger.info("Settings file %s not found, using defaults", self.path)
            return self.shape.default_value()
        text = self.path.read_text(encoding="utf-8")
        logger.debug("Loaded %d bytes from %s", len(text), self.path)
        return deserialize_record(text, self.shape)

    def save(self, record: Any) -> None:
        """Write the record, creating parent directories as needed."""
        text = serialize_record(record, self.fmt, shape=self.shape)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text + "\n", encoding="utf-8")
        logger.info("Saved %s to %s", self.shape.name, self.path)

    def __repr__(self) -> str:
        return f"SettingsFile({str(self.path)!r}, {self.shape.name!r})"
