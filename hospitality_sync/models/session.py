"""Signed-in user as reported by ``GET /auth/me``."""

from typing import Optional

from pydantic import BaseModel, Field

from hospitality_sync.models.common import EntityId

ROLE_ADMIN = "ADMIN"
ROLE_OWNER = "OWNER"
ROLE_MANAGER = "MANAGER"
ROLE_CASHIER = "CASHIER"


class SessionUser(BaseModel):
    """Authenticated user with role helpers.

    The helpers overlap: OWNER counts as admin, ADMIN counts as
    owner, and a super admin passes every admin-level check.
    """

    id: EntityId
    name: str = ""
    username: Optional[str] = None
    role: str = ""
    is_super_admin: bool = Field(default=False, alias="isSuperAdmin")
    tenant_slug: Optional[str] = Field(None, alias="tenantSlug")
    tenant_name: Optional[str] = Field(None, alias="tenantName")

    class Config:
        extra = "allow"
        populate_by_name = True

    @property
    def is_admin(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_OWNER) or self.is_super_admin

    @property
    def is_owner(self) -> bool:
        return self.role in (ROLE_OWNER, ROLE_ADMIN)

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    @property
    def is_cashier(self) -> bool:
        return self.role == ROLE_CASHIER

    @property
    def can_view_analytics(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_OWNER, ROLE_MANAGER) or self.is_super_admin

    @property
    def can_verify_tasks(self) -> bool:
        """Task verification sits behind the server's manager gate."""
        return self.is_admin or self.is_manager

    @property
    def login_path(self) -> str:
        """Where a shell should send this user to re-authenticate."""
        slug = self.tenant_slug or ("admin" if self.is_super_admin else None)
        return f"/{slug}/login" if slug else "/"
