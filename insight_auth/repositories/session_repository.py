from sqlalchemy.orm import Session as DbSession

from insight_auth.database.models import Session, User


class SessionRepository:

    @staticmethod
    def create(db: DbSession, *, user_id: str, token_hash: str) -> Session:
        session = Session(user_id=user_id, token_hash=token_hash)
        db.add(session)
        db.flush()
        return session

    @staticmethod
    def get_user(db: DbSession, token_hash: str) -> User | None:
        return (
            db.query(User)
            .join(Session, Session.user_id == User.id)
            .filter(Session.token_hash == token_hash)
            .first()
        )

    @staticmethod
    def delete(db: DbSession, token_hash: str) -> int:
        return (
            db.query(Session)
            .filter(Session.token_hash == token_hash)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def delete_for_user(db: DbSession, user_id: str) -> int:
        return (
            db.query(Session)
            .filter(Session.user_id == user_id)
            .delete(synchronize_session=False)
        )
