"""
Session — per-user document state, ingestion and question answering.

Public API
----------
- :class:`RagSession` — one uploaded document and its transcript.
- :class:`SessionManager` — registry of live sessions.
- :class:`SessionState`, :class:`SessionStatus`, :class:`ChatMessage` — state types.
"""

from docrag.session.manager import SessionManager
from docrag.session.session import RagSession
from docrag.session.state import ChatMessage, SessionState, SessionStatus

__all__ = [
    "ChatMessage",
    "RagSession",
    "SessionManager",
    "SessionState",
    "SessionStatus",
]
