from .invite_code import InviteCode
from .invite_claim import InviteClaim

__all__ = ["InviteCode", "InviteClaim"]
