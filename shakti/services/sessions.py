### Description ###
# Shakti - Loan Recovery Management Platform
# - Session Persistence -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Session Persistence

Two ways a SessionIdentity outlives the login call:
- Signed JWT session tokens for HTTP clients (Authorization: Bearer)
- A JSON key-value file for the command-line client, holding one
  fixed key that is read on start, written on login, removed on logout
"""

import json
from datetime import datetime, timedelta
from pathlib import Path

import jwt

from shakti.config import get_api_settings, get_project_root
from shakti.services.authenticator import SessionIdentity
from shakti.utils import get_logger

logger = get_logger(__name__)

TOKEN_TYPE = "session"
TOKEN_ALGORITHM = "HS256"
SESSION_KEY = "shakti.session"


def issue_session_token(identity: SessionIdentity) -> tuple[str, int]:
    """
    Sign a session token for an identity.

    Returns:
        Tuple of (token, expires_in seconds)
    """
    settings = get_api_settings()
    expires_delta = timedelta(hours=settings.session_ttl_hours)
    expire = datetime.utcnow() + expires_delta

    token_data = {
        "sub": str(identity.principal_id),
        "exp": expire,
        "type": TOKEN_TYPE,
        "session": identity.to_dict(),
    }

    token = jwt.encode(token_data, settings.secret_key, algorithm=TOKEN_ALGORITHM)
    return token, int(expires_delta.total_seconds())


def decode_session_token(token: str) -> SessionIdentity | None:
    """Verify a session token; None when expired, tampered or not a session token"""
    settings = get_api_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if payload.get("type") != TOKEN_TYPE or not isinstance(payload.get("session"), dict):
        return None

    try:
        return SessionIdentity.from_dict(payload["session"])
    except TypeError:
        return None


def get_default_session_path() -> Path:
    return get_project_root() / "data" / "session.json"


class SessionStore:
    """
    Durable key-value file holding the CLI's current session.

    The file may hold other keys; only SESSION_KEY is touched.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else get_default_session_path()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def load(self) -> tuple[SessionIdentity, str | None] | None:
        """
        Read the stored session.

        Returns:
            Tuple of (identity, token), or None when nobody is logged in
        """
        record = self._read().get(SESSION_KEY)
        if not isinstance(record, dict) or not isinstance(record.get("identity"), dict):
            return None
        try:
            identity = SessionIdentity.from_dict(record["identity"])
        except TypeError:
            logger.warning(f"Discarding malformed session in {self.path}")
            return None
        return identity, record.get("token")

    def save(self, identity: SessionIdentity, token: str | None = None) -> None:
        data = self._read()
        data[SESSION_KEY] = {"identity": identity.to_dict(), "token": token}
        self._write(data)
        logger.debug(f"Session saved for {identity.role} {identity.principal_id}")

    def clear(self) -> bool:
        """
        Remove the stored session.

        Returns:
            True if a session was removed
        """
        data = self._read()
        if SESSION_KEY not in data:
            return False
        del data[SESSION_KEY]
        if data:
            self._write(data)
        else:
            self.path.unlink(missing_ok=True)
        return True
