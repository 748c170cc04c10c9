# repertoire_trainer/persistence/opening_store.py
"""
Data Access Layer for the user's opening collection.

The collection is a single JSON document holding a list of opening records.
`JsonOpeningStore` reads and writes it with `aiofiles` so the event loop that
runs the practice session is never blocked on disk I/O. Every record read
back passes through `ensure_opening_defaults`, so hand-edited or older files
with missing fields load cleanly.
"""
import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles
import structlog

from repertoire_trainer.config.settings import StoreSettings
from repertoire_trainer.core.opening_defaults import (ensure_opening_defaults, find_opening,
                                                      opening_to_dict, sort_by_created)
from repertoire_trainer.exceptions import OpeningNotFoundError, OpeningStoreError
from repertoire_trainer.persistence.seed_data import seed_openings
from repertoire_trainer.types import Annotation, Opening

logger = structlog.get_logger(__name__)


class JsonOpeningStore:
    """An async `OpeningStore` persisting the whole collection to one JSON file."""

    def __init__(self, settings: StoreSettings):
        self._path = Path(settings.json_filepath)
        self._seed_when_missing = settings.seed_when_missing
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def _read(self) -> List[Opening]:
        if not self._path.exists():
            if not self._seed_when_missing:
                return []
            openings = sort_by_created(seed_openings())
            logger.info("Opening store not found; writing built-in repertoires.",
                        path=str(self._path), count=len(openings))
            await self._write(openings)
            return openings

        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                raw = json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            raise OpeningStoreError(f"Could not read opening store {self._path}: {e}") from e

        if not isinstance(raw, list):
            raise OpeningStoreError(f"Opening store {self._path} must hold a list of openings.")
        try:
            openings = [ensure_opening_defaults(record) for record in raw]
        except (AttributeError, TypeError, ValueError) as e:
            raise OpeningStoreError(f"Malformed opening record in {self._path}: {e}") from e
        return sort_by_created(openings)

    async def _write(self, openings: Sequence[Opening]) -> None:
        payload = json.dumps([opening_to_dict(o) for o in openings], indent=2, ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self._path, "w", encoding="utf-8") as f:
                await f.write(payload)
        except OSError as e:
            raise OpeningStoreError(f"Could not write opening store {self._path}: {e}") from e
        logger.debug("Opening store written.", path=str(self._path), count=len(openings))

    async def load_all(self) -> List[Opening]:
        """Returns every stored opening, newest first."""
        async with self._lock:
            return await self._read()

    async def save_all(self, openings: Sequence[Opening]) -> None:
        """Replaces the stored collection with `openings`."""
        async with self._lock:
            await self._write(sort_by_created(openings))

    async def get(self, opening_id: str) -> Opening:
        """
        Raises:
            OpeningNotFoundError: If no opening has the given id.
        """
        for opening in await self.load_all():
            if opening.id == opening_id:
                return opening
        raise OpeningNotFoundError(f"No opening with id '{opening_id}'.")

    async def find_by_name(self, name: Optional[str]) -> Optional[Opening]:
        """Finds an opening by display name, falling back to the newest one."""
        return find_opening(await self.load_all(), name)

    async def upsert(self, opening: Opening) -> Opening:
        """Inserts `opening`, or replaces the stored record with the same id."""
        async with self._lock:
            stored = await self._read()
            openings = [o for o in stored if o.id != opening.id]
            is_new = len(openings) == len(stored)
            openings.append(opening)
            await self._write(sort_by_created(openings))
        logger.info("Opening saved.", opening_id=opening.id, name=opening.name, created=is_new)
        return opening

    async def delete(self, opening_id: str) -> None:
        async with self._lock:
            openings = await self._read()
            remaining = [o for o in openings if o.id != opening_id]
            if len(remaining) == len(openings):
                raise OpeningNotFoundError(f"No opening with id '{opening_id}'.")
            await self._write(remaining)
        logger.info("Opening deleted.", opening_id=opening_id)

    async def update_annotations(self, opening_id: str, annotations: List[Annotation]) -> Opening:
        """Replaces the annotations of one opening and returns the updated record."""
        async with self._lock:
            openings = await self._read()
            for position, opening in enumerate(openings):
                if opening.id == opening_id:
                    updated = replace(opening, annotations=list(annotations))
                    openings[position] = updated
                    await self._write(openings)
                    break
            else:
                raise OpeningNotFoundError(f"No opening with id '{opening_id}'.")
        logger.info("Opening annotations updated.", opening_id=opening_id, count=len(annotations))
        return updated
