"""Per-thread `requests` sessions for clients called from `asyncio.to_thread` workers."""

from __future__ import annotations

import threading

import requests

_local = threading.local()


def thread_session() -> requests.Session:
    """Session owned by the calling thread; a Session is never shared across workers."""
    session = getattr(_local, "session", None)
    if session is None:
        session = _local.session = requests.Session()
    return session
