# retail_pos/modules/images/storage.py
from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from pathlib import Path

from ...errors import ValidationError

_log = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)
_ALLOWED_EXT = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}


class ImageStore:
    """
    Product pictures on disk, referenced from products.image by file name only.

    save() -> stored name, path() -> absolute path, delete() -> release.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _decode(self, data: bytes | str) -> bytes:
        if isinstance(data, bytes):
            return data
        payload = _DATA_URL.sub("", data.strip())
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Image data is not valid base64.") from e

    def _new_name(self, suggested_name: str) -> str:
        ext = Path(suggested_name or "").suffix.lower()
        if ext not in _ALLOWED_EXT:
            ext = ".png"
        name = f"produto_{int(time.time() * 1000)}{ext}"
        # two saves inside the same millisecond
        n = 1
        while (self.root / name).exists():
            name = f"produto_{int(time.time() * 1000)}_{n}{ext}"
            n += 1
        return name

    def save(self, data: bytes | str, suggested_name: str) -> str:
        raw = self._decode(data)
        if not raw:
            raise ValidationError("Image is empty.")
        self.root.mkdir(parents=True, exist_ok=True)
        name = self._new_name(suggested_name)
        (self.root / name).write_bytes(raw)
        _log.debug("Stored image %s (%d bytes)", name, len(raw))
        return name

    def path(self, filename: str | None) -> Path | None:
        if not filename:
            return None
        # stored names never contain directories
        return self.root / Path(filename).name

    def delete(self, filename: str | None) -> bool:
        p = self.path(filename)
        if p is None or not p.exists():
            return False
        p.unlink()
        return True
