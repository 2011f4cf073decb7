"""SessionManager mapping session identifiers to conversation engines.

This module provides the SessionManager class which handles:
- Creating and initializing an engine on a session's first request
- Returning the same engine for every later request of that session
- Tearing down one session on explicit clear
- Tearing down every session on shutdown
"""

import asyncio
import logging
from typing import Callable

from toolbridge.errors import SessionInitFailed
from toolbridge.sessions.engine import ConversationEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], ConversationEngine]


class SessionManager:
    """Owns the live conversation engines of the process.

    All access happens on one event loop. Each session has at most one
    creation task in flight, which concurrent first requests share. A
    creation task stores its engine only while it is still the session's
    current one and the manager is open, so remove() and shutdown() also
    cover sessions that are still initializing.
    """

    def __init__(self, engine_factory: EngineFactory) -> None:
        """Initialize the SessionManager.

        Args:
            engine_factory: Callable building a new, uninitialized engine
        """
        self.engine_factory = engine_factory
        self._sessions: dict[str, ConversationEngine] = {}
        self._pending: dict[str, asyncio.Task[ConversationEngine]] = {}
        self._closed = False

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def session_ids(self) -> list[str]:
        """Identifiers of all live sessions."""
        return list(self._sessions)

    def get(self, session_id: str) -> ConversationEngine | None:
        """Get a live engine without creating one."""
        return self._sessions.get(session_id)

    def is_initializing(self, session_id: str) -> bool:
        """Whether an engine for the session is still being created."""
        return session_id in self._pending

    async def get_or_create(self, session_id: str) -> ConversationEngine:
        """Get the engine for a session, creating it on first use.

        Args:
            session_id: Opaque session identifier

        Returns:
            The session's ConversationEngine

        Raises:
            SessionInitFailed: If the new engine fails to initialize, if the
                session is removed while initializing, or if the manager is
                shut down; nothing is stored, so the next call retries
        """
        engine = self._sessions.get(session_id)
        if engine is not None:
            return engine

        if self._closed:
            raise SessionInitFailed(
                session_id, f"Cannot create session {session_id}: shutting down"
            )

        task = self._pending.get(session_id)
        if task is None:
            task = asyncio.create_task(self._create(session_id))
            self._pending[session_id] = task
            task.add_done_callback(
                lambda done: self._forget_pending(session_id, done)
            )

        # A cancelled caller must not cancel creation for the other waiters
        return await asyncio.shield(task)

    def _forget_pending(
        self, session_id: str, task: asyncio.Task[ConversationEngine]
    ) -> None:
        if self._pending.get(session_id) is task:
            del self._pending[session_id]

    async def _create(self, session_id: str) -> ConversationEngine:
        logger.info(f"Creating new conversation engine for session {session_id}")
        engine = self.engine_factory()
        try:
            await engine.initialize()
        except Exception as e:
            logger.error(f"Failed to initialize session {session_id}: {e}")
            await engine.cleanup()
            raise SessionInitFailed(
                session_id, f"Failed to initialize session {session_id}: {e}"
            ) from e

        if self._closed or self._pending.get(session_id) is not asyncio.current_task():
            logger.info(f"Session {session_id} was closed during initialization")
            await engine.cleanup()
            raise SessionInitFailed(
                session_id, f"Session {session_id} was closed during initialization"
            )

        self._sessions[session_id] = engine
        return engine

    async def remove(self, session_id: str) -> bool:
        """Clean up and forget a session.

        A creation still in flight is abandoned and awaited, so its engine
        is torn down before this returns.

        Args:
            session_id: The session ID to remove

        Returns:
            True if the session existed or was initializing, False otherwise
        """
        task = self._pending.pop(session_id, None)
        engine = self._sessions.pop(session_id, None)

        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
            logger.info(f"Abandoned initialization of session {session_id}")

        if engine is None:
            return task is not None

        await engine.cleanup()
        logger.info(f"Removed conversation engine for session {session_id}")
        return True

    async def shutdown(self) -> None:
        """Clean up every live session and refuse new ones.

        Creations still in flight are awaited and tear down their own
        engines.
        """
        self._closed = True
        pending = list(self._pending.values())
        self._pending.clear()
        sessions = list(self._sessions.items())
        self._sessions.clear()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for session_id, engine in sessions:
            try:
                await engine.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up session {session_id}: {e}")
                continue
            logger.info(f"Cleaned up session {session_id}")
