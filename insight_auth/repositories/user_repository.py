from typing import Optional

from sqlalchemy.orm import Session

from insight_auth.database.models import User, ROLE_STANDARD


class UserRepository:

    @staticmethod
    def create(
        db: Session,
        *,
        organization_id: str,
        email: str,
        role: str = ROLE_STANDARD,
        password_hash: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> User:
        user = User(
            organization_id=organization_id,
            email=email,
            role=role,
            password_hash=password_hash,
            full_name=full_name,
        )
        db.add(user)
        db.flush()
        return user

    @staticmethod
    def get_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def store_password(db: Session, user_id: str, password_hash: str) -> int:
        """Overwrite the user's password hash; returns the affected row count"""
        return db.query(User).filter(User.id == user_id).update(
            {User.password_hash: password_hash}, synchronize_session=False
        )
