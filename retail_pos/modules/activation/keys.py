# retail_pos/modules/activation/keys.py
"""
License keys: a keyed digest of the client's name, shown in 4-char groups.

    generate_key("Padaria Central", secret) -> "1A2B-3C4D-...-9F0E"

Keys issued by earlier releases validate unchanged (same digest and
grouping). The check runs once per session; it is a gate, not security.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional
import hashlib
import hmac
import json
import logging

from ...errors import ValidationError

_log = logging.getLogger(__name__)

_GROUP = 4


def _normalize_name(client_name: str) -> str:
    if client_name is None or not str(client_name).strip():
        raise ValidationError("Client name cannot be empty.")
    return str(client_name).strip().upper()


def _normalize_key(key: str) -> str:
    return "".join(str(key or "").split()).upper()


def generate_key(client_name: str, secret: str) -> str:
    raw = _normalize_name(client_name) + secret
    digest = hashlib.md5(raw.encode("utf-8"), usedforsecurity=False).hexdigest().upper()
    return "-".join(digest[i:i + _GROUP] for i in range(0, len(digest), _GROUP))


def validate_key(key: str, client_name: str, secret: str) -> bool:
    try:
        expected = generate_key(client_name, secret)
    except ValidationError:
        return False
    return hmac.compare_digest(_normalize_key(key).encode(), expected.encode())


@dataclass
class ActivationState:
    activated: bool = False
    client_name: Optional[str] = None
    key: Optional[str] = None


class ActivationStore:
    """activation.json in the data directory."""

    def __init__(self, path: Path | str, secret: str):
        self.path = Path(path)
        self.secret = secret

    def load(self) -> ActivationState:
        if not self.path.exists():
            return ActivationState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _log.warning("Ignoring unreadable activation file %s: %s", self.path, e)
            return ActivationState()
        return ActivationState(
            activated=bool(data.get("activated")),
            client_name=data.get("client_name"),
            key=data.get("key"),
        )

    def is_activated(self) -> bool:
        """Stored state is re-validated so a hand-edited file does not pass."""
        st = self.load()
        return bool(
            st.activated and st.client_name and st.key
            and validate_key(st.key, st.client_name, self.secret)
        )

    def activate(self, client_name: str, key: str) -> ActivationState:
        if not validate_key(key, client_name, self.secret):
            raise ValidationError("Invalid activation key.")
        st = ActivationState(activated=True, client_name=str(client_name).strip(), key=_normalize_key(key))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(st), ensure_ascii=False), encoding="utf-8")
        _log.info("Activated for %s", st.client_name)
        return st
