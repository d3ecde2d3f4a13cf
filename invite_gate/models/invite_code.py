from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint

from ..database import Base
from ..utils.time_utils import utcnow

class InviteCode(Base):
    __tablename__ = "invite_codes"

    code = Column(String, primary_key=True)
    is_active = Column(Boolean, nullable=False, default=True)
    max_uses = Column(Integer, nullable=True)  # null means unbounded
    uses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("max_uses IS NULL OR uses <= max_uses", name="ck_invite_codes_uses_within_max"),
    )

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and (self.uses or 0) >= self.max_uses
