"""
Saved drawing storage for Color Canvas.

This module is the persistence layer for finished drawings. Each drawing is
kept as a PNG file beside a JSON index holding its metadata:

    <base_dir>/SavedDrawings/
        index.json
        <drawing id>.png

The index schema includes:
- schema version
- one record per drawing: id, source image id, file name, creation time

The index is replaced atomically on every write. A damaged index is never
overwritten: it is moved aside as ``index.json.corrupt-<timestamp>`` and the
drawings are recovered from the image files on disk.

Classes:
    SavedDrawing: Immutable saved drawing record
    DrawingStore: Directory-backed store

Functions:
    get_saved_drawings_dir: Resolve (and create) the store directory
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from CC_Libs.constants import (
    FIELD_CREATED_AT,
    FIELD_DRAWING_ID,
    FIELD_DRAWINGS,
    FIELD_FILE_NAME,
    FIELD_SCHEMA_VERSION,
    FIELD_SOURCE_IMAGE_ID,
    SAVED_DRAWING_EXTENSION,
    SAVED_DRAWINGS_DIR_NAME,
    SAVED_INDEX_FILE_NAME,
    STORE_SCHEMA_VERSION,
)
from CC_Libs.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedDrawing:
    id: str
    source_image_id: str
    encoded_image_bytes: bytes
    created_at: str


def get_saved_drawings_dir(base_dir: Path) -> Path:
    drawings_dir = base_dir / SAVED_DRAWINGS_DIR_NAME
    drawings_dir.mkdir(parents=True, exist_ok=True)
    return drawings_dir


def _empty_index() -> Dict[str, Any]:
    return {
        FIELD_SCHEMA_VERSION: STORE_SCHEMA_VERSION,
        FIELD_DRAWINGS: [],
    }


def _normalize_record(record: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Normalize one index record, dropping records without an id."""
    drawing_id = str(record.get(FIELD_DRAWING_ID) or "").strip()
    if not drawing_id:
        return None

    return {
        FIELD_DRAWING_ID: drawing_id,
        FIELD_SOURCE_IMAGE_ID: str(record.get(FIELD_SOURCE_IMAGE_ID) or ""),
        FIELD_FILE_NAME: str(record.get(FIELD_FILE_NAME) or f"{drawing_id}{SAVED_DRAWING_EXTENSION}"),
        FIELD_CREATED_AT: str(record.get(FIELD_CREATED_AT) or ""),
    }


class DrawingStore:
    """
    Local durable storage for saved drawings.

    Example:
        >>> store = DrawingStore(Path.home() / ".color_canvas")
        >>> saved = store.save("castle", png_bytes)
        >>> [d.id for d in store.list_saved()] == [saved.id]
        True
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    @property
    def drawings_dir(self) -> Path:
        return self.base_dir / SAVED_DRAWINGS_DIR_NAME

    @property
    def index_path(self) -> Path:
        return self.drawings_dir / SAVED_INDEX_FILE_NAME

    def _read_index_payload(self) -> Optional[Dict[str, Any]]:
        """
        Parse the index file.

        Returns:
            The parsed payload, or None if there is no index yet

        Raises:
            ValueError: If the file exists but does not hold a JSON object
            OSError: If the file cannot be read
        """
        try:
            payload = json.loads(self.index_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        if not isinstance(payload, dict):
            raise ValueError("index is not a JSON object")
        return payload

    def _normalize_index(self, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if payload is None:
            return _empty_index()

        records = payload.get(FIELD_DRAWINGS)
        normalized: List[Dict[str, str]] = []
        seen = set()
        if isinstance(records, list):
            for record in records:
                if not isinstance(record, dict):
                    continue
                entry = _normalize_record(record)
                if entry is None or entry[FIELD_DRAWING_ID] in seen:
                    continue
                seen.add(entry[FIELD_DRAWING_ID])
                normalized.append(entry)

        payload[FIELD_DRAWINGS] = normalized
        payload.setdefault(FIELD_SCHEMA_VERSION, STORE_SCHEMA_VERSION)
        return payload

    def _recovered_index(self) -> Dict[str, Any]:
        """
        Rebuild an index from the image files in the store directory.

        Source image ids are not stored in the image files, so recovered
        records have an empty source_image_id. Creation times come from the
        file modification times.
        """
        payload = _empty_index()
        if not self.drawings_dir.is_dir():
            return payload

        images = sorted(
            self.drawings_dir.glob(f"*{SAVED_DRAWING_EXTENSION}"),
            key=lambda path: (path.stat().st_mtime_ns, path.name),
        )
        for path in images:
            payload[FIELD_DRAWINGS].append({
                FIELD_DRAWING_ID: path.stem,
                FIELD_SOURCE_IMAGE_ID: "",
                FIELD_FILE_NAME: path.name,
                FIELD_CREATED_AT: datetime.fromtimestamp(path.stat().st_mtime).isoformat(timespec="seconds"),
            })
        return payload

    def _load_index(self) -> Dict[str, Any]:
        """
        Load the index for reading, normalizing its records.

        A missing index reads as empty. A damaged index is left on disk
        untouched and the drawings are listed from the image files instead.
        """
        try:
            payload = self._read_index_payload()
        except (ValueError, OSError) as exc:
            logger.warning(
                "Saved drawing index %s is unreadable (%s); listing image files instead",
                self.index_path,
                exc,
            )
            return self._recovered_index()
        return self._normalize_index(payload)

    def _load_index_for_update(self) -> Dict[str, Any]:
        """
        Load the index before rewriting it.

        A damaged index is moved aside (never overwritten) and replaced by
        one recovered from the image files.

        Raises:
            OSError: If the index cannot be read or moved aside
        """
        try:
            payload = self._read_index_payload()
        except ValueError as exc:
            stamp = datetime.now().strftime("%Y%m%dT%H%M%S")
            damaged_path = self.index_path.with_name(f"{SAVED_INDEX_FILE_NAME}.corrupt-{stamp}")
            os.replace(self.index_path, damaged_path)
            logger.warning(
                "Saved drawing index %s is damaged (%s); moved it to %s",
                self.index_path,
                exc,
                damaged_path,
            )
            return self._recovered_index()
        return self._normalize_index(payload)

    def _write_index(self, payload: Dict[str, Any]) -> None:
        """Write the index atomically: a temporary file is swapped in with os.replace."""
        payload[FIELD_SCHEMA_VERSION] = STORE_SCHEMA_VERSION
        temp_path = self.index_path.with_name(f"{SAVED_INDEX_FILE_NAME}.tmp")
        try:
            temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(temp_path, self.index_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def _read_drawing(self, record: Dict[str, str]) -> SavedDrawing:
        data = (self.drawings_dir / record[FIELD_FILE_NAME]).read_bytes()
        return SavedDrawing(
            id=record[FIELD_DRAWING_ID],
            source_image_id=record[FIELD_SOURCE_IMAGE_ID],
            encoded_image_bytes=data,
            created_at=record[FIELD_CREATED_AT],
        )

    def save(self, source_image_id: str, encoded_bytes: bytes) -> SavedDrawing:
        """
        Persist an encoded drawing.

        The image file is removed again if the index cannot be updated, so a
        failed save leaves the store as it was.

        Args:
            source_image_id: Catalog id of the line art the drawing was made on
            encoded_bytes: PNG bytes of the finished buffer

        Returns:
            The new SavedDrawing record

        Raises:
            PersistenceError: If the image or the index cannot be written
        """
        if not encoded_bytes:
            raise PersistenceError("Refusing to save an empty drawing")

        drawing_id = str(uuid.uuid4())
        file_name = f"{drawing_id}{SAVED_DRAWING_EXTENSION}"
        created_at = datetime.now().isoformat(timespec="seconds")

        try:
            drawings_dir = get_saved_drawings_dir(self.base_dir)
            payload = self._load_index_for_update()
        except OSError as exc:
            raise PersistenceError(f"Could not save drawing for '{source_image_id}': {exc}") from exc

        image_path = drawings_dir / file_name
        payload[FIELD_DRAWINGS].append({
            FIELD_DRAWING_ID: drawing_id,
            FIELD_SOURCE_IMAGE_ID: str(source_image_id),
            FIELD_FILE_NAME: file_name,
            FIELD_CREATED_AT: created_at,
        })
        try:
            image_path.write_bytes(encoded_bytes)
            self._write_index(payload)
        except OSError as exc:
            try:
                image_path.unlink(missing_ok=True)
            except OSError as cleanup_exc:
                logger.warning("Could not remove unsaved drawing file %s: %s", image_path, cleanup_exc)
            raise PersistenceError(f"Could not save drawing for '{source_image_id}': {exc}") from exc

        logger.info("Saved drawing %s for image %s", drawing_id, source_image_id)
        return SavedDrawing(
            id=drawing_id,
            source_image_id=str(source_image_id),
            encoded_image_bytes=bytes(encoded_bytes),
            created_at=created_at,
        )

    def list_saved(self) -> List[SavedDrawing]:
        """
        List saved drawings in the order they were saved.

        Records whose image file has gone missing are skipped.
        """
        drawings: List[SavedDrawing] = []
        for record in self._load_index()[FIELD_DRAWINGS]:
            try:
                drawings.append(self._read_drawing(record))
            except OSError as exc:
                logger.warning("Skipping saved drawing %s: %s", record[FIELD_DRAWING_ID], exc)
        return drawings

    def load_saved(self, saved_id: str) -> SavedDrawing:
        """
        Load one saved drawing.

        Raises:
            PersistenceError: If the id is unknown or its image cannot be read
        """
        for record in self._load_index()[FIELD_DRAWINGS]:
            if record[FIELD_DRAWING_ID] != saved_id:
                continue
            try:
                return self._read_drawing(record)
            except OSError as exc:
                raise PersistenceError(f"Could not read saved drawing '{saved_id}': {exc}") from exc
        raise PersistenceError(f"Saved drawing not found: {saved_id}")

    def delete_saved(self, saved_id: str) -> bool:
        """
        Remove a saved drawing and its image file.

        Returns:
            True if a drawing was removed, False if the id was unknown

        Raises:
            PersistenceError: If the index cannot be rewritten
        """
        try:
            payload = self._load_index_for_update()
        except OSError as exc:
            raise PersistenceError(f"Could not delete saved drawing '{saved_id}': {exc}") from exc

        remaining = [r for r in payload[FIELD_DRAWINGS] if r[FIELD_DRAWING_ID] != saved_id]
        if len(remaining) == len(payload[FIELD_DRAWINGS]):
            return False

        removed = next(r for r in payload[FIELD_DRAWINGS] if r[FIELD_DRAWING_ID] == saved_id)
        payload[FIELD_DRAWINGS] = remaining
        try:
            self._write_index(payload)
            (self.drawings_dir / removed[FIELD_FILE_NAME]).unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Could not delete saved drawing '{saved_id}': {exc}") from exc

        logger.info("Deleted saved drawing %s", saved_id)
        return True
