"""
AQL Job Desk - Identity Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-09-28): Explicit per-login session instead of cached role state
"""

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    INSPECTOR = "inspector"
    HR = "hr"
    ACCOUNTING = "accounting"
    CUSTOMER = "customer"


class UserSession(BaseModel):
    """
    Identity supplied by the identity provider for one login.

    Immutable: sign-out discards it and the next login builds a new one.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
