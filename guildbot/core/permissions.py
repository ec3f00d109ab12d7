"""Tiered permission model and the evaluator that checks it."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .models import ActorProfile, Membership


class Permission(IntEnum):
    """Ordered capability tiers. ``ANY`` means no privilege at all."""

    ANY = 0
    MODERATOR = 1
    ADMIN = 2
    BOT_OWNER = 3

    @classmethod
    def from_name(cls, name: str) -> "Permission":
        try:
            return cls[name.strip().upper().replace("-", "_")]
        except KeyError as exc:
            raise ValueError(f"Unknown permission tier: {name}") from exc


class PermissionState(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PermissionEvaluator:
    """Decides whether an actor covers a required tier.

    The evaluator only holds static configuration (which role ids map to
    which tier, which users own the bot); evaluation itself does no I/O and
    never raises. Missing membership or profile simply contributes
    ``Permission.ANY``.
    """

    def __init__(
        self,
        admin_role_ids: Iterable[str] = (),
        moderator_role_ids: Iterable[str] = (),
        owner_ids: Iterable[str] = (),
    ) -> None:
        self._admin_role_ids = frozenset(admin_role_ids)
        self._moderator_role_ids = frozenset(moderator_role_ids)
        self._owner_ids = frozenset(owner_ids)

    def membership_permission(self, membership: Optional["Membership"]) -> Permission:
        if membership is None:
            return Permission.ANY
        if membership.user_id in self._owner_ids:
            return Permission.BOT_OWNER
        if membership.is_owner or membership.is_admin:
            return Permission.ADMIN
        if membership.role_ids & self._admin_role_ids:
            return Permission.ADMIN
        if membership.role_ids & self._moderator_role_ids:
            return Permission.MODERATOR
        return Permission.ANY

    def profile_permission(self, profile: Optional["ActorProfile"]) -> Permission:
        if profile is None:
            return Permission.ANY
        if profile.user_id in self._owner_ids:
            return Permission.BOT_OWNER
        return profile.permission if profile.permission is not None else Permission.ANY

    def effective_permission(
        self,
        membership: Optional["Membership"],
        profile: Optional["ActorProfile"],
        user_id: Optional[str] = None,
    ) -> Permission:
        if user_id is not None and user_id in self._owner_ids:
            return Permission.BOT_OWNER
        return max(self.membership_permission(membership), self.profile_permission(profile))

    def evaluate(
        self,
        requirement: Permission,
        membership: Optional["Membership"],
        profile: Optional["ActorProfile"],
        user_id: Optional[str] = None,
    ) -> PermissionState:
        if self.effective_permission(membership, profile, user_id) >= requirement:
            return PermissionState.ACCEPTED
        return PermissionState.REJECTED

    def has(
        self,
        requirement: Permission,
        membership: Optional["Membership"],
        profile: Optional["ActorProfile"],
        user_id: Optional[str] = None,
    ) -> bool:
        return self.evaluate(requirement, membership, profile, user_id) == PermissionState.ACCEPTED
