"""
Memory systems for Tracewise.

Provides:
- Session store (durable per-session conversation state in Redis)
"""

from libs.memory.session_store import SessionStore

__all__ = ["SessionStore"]
