import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Index

from ..database import Base
from ..utils.time_utils import utcnow

class InviteClaim(Base):
    __tablename__ = "invite_claims"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, nullable=False)
    code = Column(String, ForeignKey("invite_codes.code"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    consumed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_invite_claims_email_created_at", "email", "created_at"),
        Index("ix_invite_claims_email_code", "email", "code"),
    )
