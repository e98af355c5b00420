from datetime import datetime

from sqlalchemy.orm import Session

from insight_auth.database.models import PasswordResetRequest


class PasswordResetRepository:

    @staticmethod
    def create(
        db: Session,
        *,
        organization_id: str,
        user_id: str,
        email: str,
        token_hash: str,
    ) -> PasswordResetRequest:
        request = PasswordResetRequest(
            organization_id=organization_id,
            user_id=user_id,
            email=email,
            token_hash=token_hash,
        )
        db.add(request)
        db.flush()
        return request

    @staticmethod
    def find_active(
        db: Session,
        email: str,
        organization_id: str,
        token_hash: str,
        created_after: datetime,
    ) -> PasswordResetRequest | None:
        """Expired requests are indistinguishable from missing ones"""
        return (
            db.query(PasswordResetRequest)
            .filter(
                PasswordResetRequest.email == email,
                PasswordResetRequest.organization_id == organization_id,
                PasswordResetRequest.token_hash == token_hash,
                PasswordResetRequest.created_at > created_after,
            )
            .first()
        )

    @staticmethod
    def delete_for_user(db: Session, user_id: str) -> int:
        return (
            db.query(PasswordResetRequest)
            .filter(PasswordResetRequest.user_id == user_id)
            .delete(synchronize_session=False)
        )
