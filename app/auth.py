from __future__ import annotations

import base64
import hashlib
import secrets
from typing import Tuple

from config import EDIT_PASSWORD, VIEW_PASSWORD

PBKDF2_ITERATIONS = 120_000


def secure_hash_password(password: str) -> Tuple[str, str]:
    salt = secrets.token_bytes(16)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return (
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(derived).decode("ascii"),
    )


def verify_secure_password(password: str, salt_b64: str, hash_b64: str) -> bool:
    try:
        salt = base64.b64decode(salt_b64.encode("ascii"))
        stored = base64.b64decode(hash_b64.encode("ascii"))
    except ValueError:
        return False
    derived = hashlib.pbkdf2_hmac("sha256", (password or "").encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return secrets.compare_digest(derived, stored)


class AccessGate:
    """Two independent shared-secret gates: one for viewing, one for editing.

    Both checks are stateless; callers verify on every request.
    """

    def __init__(self, view_password: str = VIEW_PASSWORD, edit_password: str = EDIT_PASSWORD) -> None:
        self._view = secure_hash_password(view_password)
        self._edit = secure_hash_password(edit_password)

    def verify_view(self, password: str) -> bool:
        return verify_secure_password(password, *self._view)

    def verify_edit(self, password: str) -> bool:
        return verify_secure_password(password, *self._edit)
