"""Items, subjects and the item-to-file registry."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
import logging
from pathlib import Path
import re
import shutil
from typing import BinaryIO, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from study_store.database import session_scope
from study_store.models.catalog import ItemEntry, SubjectEntry
from study_store.schemas.catalog import ItemResponse

LOGGER = logging.getLogger(__name__)


def subject_key(code: str) -> str:
    return re.sub(r"\s+", "_", code.strip().lower())


def safe_filename(filename: str) -> str:
    name = Path(filename.replace("\\", "/")).name
    name = re.sub(r"\s+", "_", name.strip())
    if name in {"", ".", ".."}:
        raise ValueError("Invalid file name")
    return name


class CatalogStore:
    def __init__(self, files_dir: Path) -> None:
        self._files_dir = Path(files_dir)

    def list_items(self) -> list[ItemResponse]:
        with session_scope() as session:
            entries = session.execute(select(ItemEntry).order_by(ItemEntry.id)).scalars()
            return [self._to_response(entry) for entry in entries]

    def list_subjects(self) -> dict[str, str]:
        with session_scope() as session:
            entries = session.execute(select(SubjectEntry).order_by(SubjectEntry.key))
            return {entry.key: entry.display_name for entry in entries.scalars()}

    def add_subject(self, code: str, name: str) -> dict[str, str]:
        with session_scope() as session:
            self._upsert_subject(session, code, name)
        return self.list_subjects()

    def add_item(
        self,
        title: str,
        price: Decimal,
        description: Optional[str] = None,
        subject: Optional[str] = None,
        filename: Optional[str] = None,
        content: Optional[BinaryIO] = None,
        new_subject: Optional[tuple[str, str]] = None,
    ) -> ItemResponse:
        """Add an item, optionally registering a new (code, name) subject with it."""
        title = title.strip()
        if not title:
            raise ValueError("Title is required")
        stored_name = None
        with session_scope() as session:
            existing = session.execute(
                select(ItemEntry).where(ItemEntry.title == title)
            ).scalar_one_or_none()
            if existing:
                raise ValueError("Item already exists")
            if new_subject is not None:
                self._upsert_subject(session, *new_subject)
            if filename and content is not None:
                stored_name = self._store_file(filename, content)
            entry = ItemEntry(
                title=title,
                description=description,
                price=price,
                subject=subject,
                filename=stored_name,
                created_at=datetime.now(timezone.utc),
            )
            session.add(entry)
            session.flush()
            LOGGER.info("Added item title=%s file=%s", title, stored_name)
            return self._to_response(entry)

    def remove_item(self, item_id: int) -> bool:
        """Delete an item; return whether its file was removed from disk too."""
        with session_scope() as session:
            entry = session.get(ItemEntry, item_id)
            if entry is None:
                raise ValueError("Item not found")
            filename = entry.filename
            session.delete(entry)
            session.flush()
            if not filename:
                return False
            still_used = session.execute(
                select(func.count(ItemEntry.id)).where(ItemEntry.filename == filename)
            ).scalar_one()
        if still_used:
            return False
        path = self._files_dir / filename
        if not path.is_file():
            return False
        path.unlink()
        LOGGER.info("Deleted file %s for removed item id=%s", filename, item_id)
        return True

    def resolve_file_path(self, title: str) -> Path | None:
        with session_scope() as session:
            filename = session.execute(
                select(ItemEntry.filename).where(ItemEntry.title == title)
            ).scalar_one_or_none()
        if not filename:
            return None
        path = self._files_dir / filename
        return path if path.is_file() else None

    def _upsert_subject(self, session: Session, code: str, name: str) -> None:
        key = subject_key(code)
        display_name = f"{code.strip()} - {name.strip()}"
        entry = session.get(SubjectEntry, key)
        if entry is None:
            session.add(SubjectEntry(key=key, display_name=display_name))
        else:
            entry.display_name = display_name

    def _store_file(self, filename: str, content: BinaryIO) -> str:
        name = safe_filename(filename)
        self._files_dir.mkdir(parents=True, exist_ok=True)
        with (self._files_dir / name).open("wb") as handle:
            shutil.copyfileobj(content, handle)
        return name

    def _to_response(self, entry: ItemEntry) -> ItemResponse:
        return ItemResponse(
            id=entry.id,
            title=entry.title,
            desc=entry.description,
            price=entry.price,
            subject=entry.subject,
            filename=entry.filename,
            created_at=entry.created_at,
        )
