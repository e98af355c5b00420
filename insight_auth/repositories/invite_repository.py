from typing import List

from sqlalchemy.orm import Session

from insight_auth.database.models import TeamInvite


class InviteRepository:

    @staticmethod
    def create(
        db: Session,
        *,
        organization_id: str,
        creator_id: str,
        email: str,
        role: str,
        token_hash: str,
    ) -> TeamInvite:
        invite = TeamInvite(
            organization_id=organization_id,
            creator_id=creator_id,
            email=email,
            role=role,
            token_hash=token_hash,
        )
        db.add(invite)
        db.flush()
        return invite

    @staticmethod
    def find(db: Session, email: str, organization_id: str, token_hash: str) -> TeamInvite | None:
        return (
            db.query(TeamInvite)
            .filter(
                TeamInvite.email == email,
                TeamInvite.organization_id == organization_id,
                TeamInvite.token_hash == token_hash,
            )
            .first()
        )

    @staticmethod
    def list_for_organization(db: Session, organization_id: str) -> List[TeamInvite]:
        return (
            db.query(TeamInvite)
            .filter(TeamInvite.organization_id == organization_id)
            .order_by(TeamInvite.created_at.desc())
            .all()
        )

    @staticmethod
    def delete(db: Session, invite_id: str) -> int:
        return (
            db.query(TeamInvite)
            .filter(TeamInvite.id == invite_id)
            .delete(synchronize_session=False)
        )
