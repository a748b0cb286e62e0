"""Instance key derivation.

An instance key scopes persisted preferences to one logical target
environment (one Lidarr URL + container, optionally split further by a salt
such as a CI matrix leg). Inputs are non-secret; the key is a digest so it
never echoes them back verbatim.
"""

from __future__ import annotations

import hashlib

from e2estate.core.errors import StateArgumentError

KEY_ALGO = "sha256"
_KEY_HEX_CHARS = 32


def _normalize_url(target_url: str) -> str:
    return str(target_url or "").strip().rstrip("/")


def _normalize_salt(salt: str | None) -> str:
    if salt is None:
        return ""
    return str(salt).strip().casefold()


def derive_instance_key(target_url: str, target_identifier: str, salt: str | None = None) -> str:
    """Return the stable instance key for (url, identifier, salt).

    The salt is case-folded so `CI-Leg-A` and `ci-leg-a` collapse to the same
    key; a blank salt is the same as no salt.

    Raises:
        StateArgumentError: target_url or target_identifier is empty.
    """
    url = _normalize_url(target_url)
    ident = str(target_identifier or "").strip()
    if not url:
        raise StateArgumentError("target_url is required to derive an instance key")
    if not ident:
        raise StateArgumentError("target_identifier is required to derive an instance key")

    h = hashlib.sha256()
    for part in (url, ident, _normalize_salt(salt)):
        h.update(part.encode("utf-8"))
        h.update(b"\n")
    return f"{KEY_ALGO}:{h.hexdigest()[:_KEY_HEX_CHARS]}"
