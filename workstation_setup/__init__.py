"""Workstation setup (Python-first, state-driven).

Core design goals:
- Idempotent steps guarded by presence tests
- Resumable runs via a small state document
- Explicit configuration passed into every step
- Centralized logging
"""

__all__ = []
