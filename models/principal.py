# models/principal.py

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from models.enums import PrincipalKind


class Principal(BaseModel):
    """
    The acting identity for an authorization decision.

    Resolved once per request from the session credential and passed
    explicitly into every policy call. Immutable for the session's lifetime.
    """

    model_config = ConfigDict(frozen=True)

    kind: PrincipalKind
    id: Optional[str] = None
    username: Optional[str] = None

    # Sub-admins only. Login-time snapshot; empty means "sees nothing".
    assigned_countries: Tuple[str, ...] = ()

    login_time: Optional[datetime] = None

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(kind=PrincipalKind.anonymous)

    @property
    def is_anonymous(self) -> bool:
        return self.kind == PrincipalKind.anonymous

    @property
    def is_user(self) -> bool:
        return self.kind == PrincipalKind.user

    @property
    def is_admin(self) -> bool:
        return self.kind == PrincipalKind.admin

    @property
    def is_sub_admin(self) -> bool:
        return self.kind == PrincipalKind.sub_admin

    @property
    def is_staff(self) -> bool:
        return self.kind in (PrincipalKind.admin, PrincipalKind.sub_admin)
