from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class RbacRules(BaseModel):
    superadmin_roles: list[str] = Field(default_factory=lambda: ["superadmin"])
    community_admin_roles: list[str] = Field(default_factory=lambda: ["admin"])

class InviteRules(BaseModel):
    # None means invites never expire unless the issuer supplies expires_at
    default_ttl_days: int | None = 7
    enforce_expiry_on_accept: bool = True
    pending_list_limit: int = 100

class NotificationRules(BaseModel):
    list_limit: int = 100

class SessionCookieRules(BaseModel):
    names: list[str] = Field(default_factory=lambda: ["sb-auth-token"])
    fallback_prefix: str = "sb-"
    fallback_contains: str = "auth"

class IdentityRules(BaseModel):
    bearer_cookie_name: str = "access_token"
    session_cookie: SessionCookieRules = Field(default_factory=SessionCookieRules)
    jwt_algorithm: str = "HS256"

class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    rbac: RbacRules = Field(default_factory=RbacRules)
    invites: InviteRules = Field(default_factory=InviteRules)
    notifications: NotificationRules = Field(default_factory=NotificationRules)
    identity: IdentityRules = Field(default_factory=IdentityRules)
    ops: OpsRules = Field(default_factory=OpsRules)
