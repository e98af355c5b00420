from sqlalchemy.orm import Session

from insight_auth.database.models import Organization
from insight_auth.security.tokens import new_organization_id


class OrganizationRepository:

    @staticmethod
    def create(db: Session) -> Organization:
        # Ensure id is unique
        organization_id = new_organization_id()
        while db.query(Organization).filter(Organization.id == organization_id).first():
            organization_id = new_organization_id()

        organization = Organization(id=organization_id)
        db.add(organization)
        db.flush()
        return organization

    @staticmethod
    def delete(db: Session, organization: Organization) -> None:
        """Delete an organization together with its users and their pending requests"""
        db.delete(organization)
        db.flush()
