"""Append-only audit log of ability dispatches."""

from __future__ import annotations

import datetime
from pathlib import Path


def log_dispatch(
    audit_path: Path,
    *,
    ability: str,
    login: str,
    outcome: str,
) -> None:
    """Append one dispatch record to the audit log."""
    ts = datetime.datetime.now(tz=datetime.UTC).isoformat()
    entry = f"[{ts}] ability={ability!r} user={login!r} outcome={outcome}\n"
    audit_path.parent.mkdir(parents=True, exist_ok=True)
    with audit_path.open("a") as f:
        f.write(entry)
