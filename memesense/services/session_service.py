"""Session service - one classification workflow per client.

Each session owns an orchestrator and its notification center. Classify
requests run as background tasks so the client can poll progress through
the stages.
"""
import asyncio
import uuid
from datetime import datetime

import structlog

from ..classifiers import RemoteClassifier
from ..config import SESSION_MAX_AGE_HOURS
from ..notifier import NotificationCenter
from ..orchestrator import ClassificationOrchestrator
from ..stages import StageSequencer

logger = structlog.get_logger()


class Session:
    """A client's orchestrator plus its notifications."""

    def __init__(
        self,
        orchestrator: ClassificationOrchestrator,
        notifications: NotificationCenter,
        session_id: str | None = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.orchestrator = orchestrator
        self.notifications = notifications
        self.created_at = datetime.now()
        self.task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            **self.orchestrator.snapshot(),
        }


class SessionService:
    """Manages classification sessions.

    Handles:
    - Creating sessions with their own orchestrator
    - Starting classification in the background
    - Cleaning up old sessions
    """

    def __init__(
        self,
        classifier: RemoteClassifier,
        sequencer: StageSequencer | None = None,
        max_age_hours: int = SESSION_MAX_AGE_HOURS,
    ):
        self.classifier = classifier
        self.sequencer = sequencer or StageSequencer()
        self.max_age_hours = max_age_hours
        self._sessions: dict[str, Session] = {}

    def create_session(self) -> Session:
        """Create a new session."""
        self.cleanup_old_sessions(self.max_age_hours)

        notifications = NotificationCenter()
        orchestrator = ClassificationOrchestrator(
            classifier=self.classifier,
            notifier=notifications,
            sequencer=self.sequencer,
        )
        session = Session(orchestrator, notifications)
        self._sessions[session.session_id] = session
        logger.info("session_created", session_id=session.session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get an existing session."""
        return self._sessions.get(session_id)

    def start_classification(self, session_id: str) -> bool:
        """Start classification for a session in the background.

        Returns:
            True if a task was started, False if the orchestrator is already
            classifying or the session has no image.
        """
        session = self.get_session(session_id)
        if not session:
            return False
        if session.orchestrator.is_classifying or session.orchestrator.image is None:
            return False

        if session.is_running:
            # Left over from an abandoned attempt
            session.task.cancel()
            logger.info("stale_classification_task_cancelled", session_id=session_id)

        session.task = asyncio.create_task(self._run_classification(session))
        logger.info("classification_task_started", session_id=session_id)
        return True

    async def _run_classification(self, session: Session) -> None:
        """Run classification in background."""
        try:
            await session.orchestrator.classify()
        except asyncio.CancelledError:
            logger.info("classification_task_cancelled", session_id=session.session_id)
        except Exception as e:
            logger.error(
                "classification_task_failed",
                session_id=session.session_id,
                error=str(e),
            )

    async def wait_for(self, session_id: str) -> None:
        """Wait until the session's running classification finishes."""
        session = self.get_session(session_id)
        if session and session.task is not None:
            await session.task

    def close_session(self, session_id: str) -> bool:
        """Discard a session, cancelling any running classification.

        Returns True if the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        if session.is_running:
            session.task.cancel()
        logger.info("session_closed", session_id=session_id)
        return True

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Clean up sessions older than max_age_hours.

        Returns number of sessions cleaned up.
        """
        now = datetime.now()
        old_sessions = [
            session_id
            for session_id, session in self._sessions.items()
            if (now - session.created_at).total_seconds() / 3600 > max_age_hours
        ]

        for session_id in old_sessions:
            self.close_session(session_id)

        if old_sessions:
            logger.info("cleaned_old_sessions", count=len(old_sessions))

        return len(old_sessions)

    async def shutdown(self) -> None:
        """Cancel running tasks and drop every session."""
        tasks = [s.task for s in self._sessions.values() if s.is_running]
        for session_id in list(self._sessions):
            self.close_session(session_id)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def get_stats(self) -> dict:
        """Get session service statistics."""
        return {
            "active_sessions": len(self._sessions),
            "running_classifications": sum(
                1 for s in self._sessions.values() if s.is_running
            ),
        }
