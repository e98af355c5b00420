from sqlalchemy.orm import Session

from insight_auth.database.models import SignupRequest


class SignupRepository:

    @staticmethod
    def create(
        db: Session,
        *,
        organization_id: str,
        user_id: str,
        email: str,
        token_hash: str,
    ) -> SignupRequest:
        signup = SignupRequest(
            organization_id=organization_id,
            user_id=user_id,
            email=email,
            token_hash=token_hash,
        )
        db.add(signup)
        db.flush()
        return signup

    @staticmethod
    def find(db: Session, email: str, organization_id: str, token_hash: str) -> SignupRequest | None:
        return (
            db.query(SignupRequest)
            .filter(
                SignupRequest.email == email,
                SignupRequest.organization_id == organization_id,
                SignupRequest.token_hash == token_hash,
            )
            .first()
        )

    @staticmethod
    def delete_for_user(db: Session, user_id: str) -> int:
        """Delete every pending signup of a user; returns the affected row count"""
        return (
            db.query(SignupRequest)
            .filter(SignupRequest.user_id == user_id)
            .delete(synchronize_session=False)
        )
