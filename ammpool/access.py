"""Role-based access control and pause gating."""

from __future__ import annotations

import structlog

from ammpool.constants import DEFAULT_ADMIN_ROLE
from ammpool.errors import PoolPaused, Unauthorized

logger = structlog.get_logger()


class AccessControl:
    """Role membership table.

    The admin of a role set is DEFAULT_ADMIN_ROLE: only its members can
    grant or revoke roles.
    """

    def __init__(self, admin: str) -> None:
        self._members: dict[str, set[str]] = {DEFAULT_ADMIN_ROLE: {admin}}

    def has_role(self, role: str, account: str) -> bool:
        return account in self._members.get(role, set())

    def has_admin_role(self, account: str) -> bool:
        return self.has_role(DEFAULT_ADMIN_ROLE, account)

    def require_admin(self, account: str) -> None:
        """Raises Unauthorized unless account holds DEFAULT_ADMIN_ROLE."""
        if not self.has_admin_role(account):
            raise Unauthorized(f"{account} is missing the admin role")

    def grant_role(self, caller: str, role: str, account: str) -> None:
        self.require_admin(caller)
        self._members.setdefault(role, set()).add(account)
        logger.info("role_granted", role=role, account=account, sender=caller)

    def revoke_role(self, caller: str, role: str, account: str) -> None:
        self.require_admin(caller)
        self._members.get(role, set()).discard(account)
        logger.info("role_revoked", role=role, account=account, sender=caller)

    def members(self, role: str) -> frozenset[str]:
        return frozenset(self._members.get(role, set()))


class PauseGate:
    """Active/paused switch checked by deposit, redemption and swap."""

    def __init__(self, active: bool = True) -> None:
        self._active = active

    def is_active(self) -> bool:
        return self._active

    def require_active(self) -> None:
        if not self._active:
            raise PoolPaused("Pool is paused")

    def pause(self) -> None:
        self._active = False

    def unpause(self) -> None:
        self._active = True
