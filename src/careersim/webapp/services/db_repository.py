"""Session repository over the webapp's Flask-SQLAlchemy database."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from careersim.models.state import PlayerSession
from careersim.storage.repository import SessionRepository

from ..extensions import db
from ..models.session_record import SessionRecord

logger = logging.getLogger(__name__)


class DatabaseSessionRepository(SessionRepository):
    """Stores sessions as SessionRecord rows. Requires an app context."""

    def _commit(self) -> None:
        """Commit, rolling back on failure so the scoped session stays usable."""
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Session commit failed; rolled back")
            raise

    def load_session(self, session_id: str) -> Optional[PlayerSession]:
        record = db.session.get(SessionRecord, session_id)
        if record is None:
            return None
        return record.to_session()

    def save_session(self, session: PlayerSession) -> None:
        record = db.session.get(SessionRecord, session.session_id)
        if record is None:
            record = SessionRecord()
            db.session.add(record)
        record.update_from_session(session)
        self._commit()

    def delete_session(self, session_id: str) -> bool:
        record = db.session.get(SessionRecord, session_id)
        if record is None:
            return False
        db.session.delete(record)
        self._commit()
        return True

    def list_sessions(self, player_id: Optional[str] = None) -> list[dict]:
        query = SessionRecord.query
        if player_id is not None:
            query = query.filter_by(player_id=player_id)
        records = query.order_by(SessionRecord.updated_at.desc()).all()
        return [
            {
                "sessionId": r.session_id,
                "playerId": r.player_id,
                "currentChapter": r.current_chapter,
                "currentScene": r.current_scene,
                "updatedAt": r.updated_at.isoformat() if r.updated_at else None,
            }
            for r in records
        ]
