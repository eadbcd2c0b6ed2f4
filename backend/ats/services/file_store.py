"""
CV File Store

Persists uploaded attachments in a flat directory and hands out locators
of the form ``/uploads/<stored name>``, which are also the public URLs the
static route serves.

Stored Name Scheme:
    cv-<epoch milliseconds>-<random 0..1e9><original extension>

Files are created with exclusive-create semantics, so a name collision is
retried with a fresh random component rather than overwriting.

Usage:
    store = FileStore(Path("./uploads"))
    locator = await store.store(data, "resume.pdf")   # "/uploads/cv-...pdf"
    data, content_type = await store.retrieve(locator)
    await store.delete(locator)
"""

import logging
import mimetypes
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from ats.errors import NotFound

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"
NAME_PREFIX = "cv"
MAX_NAME_ATTEMPTS = 5
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass
class StoredFile:
    """A resolved attachment ready to be streamed back."""

    name: str
    path: Path
    content_type: str

    @property
    def inline(self) -> bool:
        # PDFs render in the browser instead of downloading
        return self.content_type == "application/pdf"


def safe_extension(filename: str) -> str:
    """Lower-cased extension of the original filename, or "" if unusable."""
    suffix = Path(filename or "").suffix.lower()
    return suffix if _EXTENSION_RE.match(suffix) else ""


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


class FileStore:
    """Attachment storage on the local filesystem."""

    def __init__(self, root: Path):
        self.root = Path(root)

    # ==================== Naming ====================

    def _unique_name(self, extension: str) -> str:
        millis = int(time.time() * 1000)
        return f"{NAME_PREFIX}-{millis}-{secrets.randbelow(10**9)}{extension}"

    def locator_for(self, name: str) -> str:
        return f"{URL_PREFIX}{name}"

    def resolve(self, locator: str) -> Path:
        """
        Map a locator (or bare stored name) to a path inside the store.

        Raises:
            NotFound: If the locator does not name a file directly inside
                the upload directory (e.g. contains path separators).
        """
        name = locator[len(URL_PREFIX):] if locator.startswith(URL_PREFIX) else locator
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise NotFound("File not found")
        return self.root / name

    # ==================== Operations ====================

    def _write_exclusive(self, data: bytes, extension: str) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        for _ in range(MAX_NAME_ATTEMPTS):
            name = self._unique_name(extension)
            try:
                with open(self.root / name, "xb") as f:
                    f.write(data)
                return name
            except FileExistsError:
                continue
        raise FileExistsError(f"Could not allocate a unique upload name after {MAX_NAME_ATTEMPTS} attempts")

    async def store(self, data: bytes, original_filename: str) -> str:
        """
        Persist attachment bytes.

        Args:
            data: File content
            original_filename: Client-supplied name; only its extension is kept

        Returns:
            Locator usable with retrieve() and delete()
        """
        name = await run_in_threadpool(self._write_exclusive, data, safe_extension(original_filename))
        logger.info(f"Stored upload {name} ({len(data)} bytes)")
        return self.locator_for(name)

    def open(self, locator: str) -> StoredFile:
        """Resolve a locator to a StoredFile, raising NotFound when absent."""
        path = self.resolve(locator)
        if not path.is_file():
            raise NotFound("File not found")
        return StoredFile(name=path.name, path=path, content_type=guess_content_type(path.name))

    async def retrieve(self, locator: str) -> Tuple[bytes, str]:
        """
        Read an attachment back.

        Returns:
            Tuple of (content bytes, content type inferred from extension)
        """
        stored = self.open(locator)
        try:
            data = await run_in_threadpool(stored.path.read_bytes)
        except FileNotFoundError:
            raise NotFound("File not found")
        return data, stored.content_type

    async def delete(self, locator: str) -> bool:
        """
        Remove an attachment.

        Idempotent: a file that is already gone is logged and reported as
        False. Other OS errors propagate to the caller.

        Returns:
            True if a file was removed
        """
        try:
            path = self.resolve(locator)
        except NotFound:
            logger.warning(f"Ignoring delete of invalid locator: {locator!r}")
            return False

        try:
            await run_in_threadpool(path.unlink)
        except FileNotFoundError:
            logger.warning(f"File already missing, nothing to delete: {path}")
            return False

        logger.info(f"Deleted file: {path}")
        return True

    def list_names(self) -> List[str]:
        """Names of all stored files (used by the orphan sweep)."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def modified_at(self, name: str) -> float:
        return (self.root / name).stat().st_mtime


def get_file_store(request: Request) -> FileStore:
    return request.app.state.file_store
