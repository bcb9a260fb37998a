from app.sessions.repository import SessionRepository
from app.sessions.service import SessionService
from app.db.models import LiveSession

__all__ = ["SessionRepository", "SessionService", "LiveSession"]
