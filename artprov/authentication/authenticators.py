# artprov/authentication/authenticators.py
"""
Authenticator identity and verification.

Mirrors the artist registry: one record per caller identity, verified
only by the registry owner, never un-verified.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from ..access import AccessControl
from ..errors import AlreadyRegistered, NotFound, Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authenticator:
    """
    A registered authenticator (expert, lab, appraisal house).

    Attributes:
        name: Display name
        credentials: Free-text statement of credentials
        verified: Set by the registry owner, never cleared
    """
    name: str
    credentials: str
    verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "credentials": self.credentials,
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Authenticator":
        return cls(
            name=data["name"],
            credentials=data.get("credentials", ""),
            verified=bool(data.get("verified", False)),
        )


class AuthenticatorRegistry:
    """Registers authenticators and lets the owner verify them."""

    def __init__(self, authenticators, access: AccessControl):
        self._authenticators = authenticators
        self._access = access

    def register_authenticator(self, caller: str, name: str, credentials: str) -> bool:
        """
        Register the caller as an authenticator.

        Raises:
            AlreadyRegistered: caller already has an authenticator record
        """
        if caller in self._authenticators:
            raise AlreadyRegistered(f"Authenticator {caller} is already registered")

        self._authenticators.put(caller, Authenticator(name=name, credentials=credentials))
        logger.info(f"Registered authenticator {caller} ({name})")
        return True

    def verify_authenticator(self, caller: str, target: str) -> bool:
        """
        Mark target's authenticator record as verified (idempotent).

        Raises:
            Unauthorized: caller is not the owner
            NotFound: target has no authenticator record
        """
        if not self._access.verify_action(caller):
            raise Unauthorized(f"{caller} may not verify authenticators")

        authenticator = self._authenticators.get(target)
        if authenticator is None:
            raise NotFound(f"No authenticator registered for {target}")

        if not authenticator.verified:
            self._authenticators.put(target, replace(authenticator, verified=True))
            logger.info(f"Verified authenticator {target}")
        return True

    def get_authenticator(self, identity: str) -> Optional[Authenticator]:
        return self._authenticators.get(identity)

    def is_verified(self, identity: str) -> bool:
        authenticator = self._authenticators.get(identity)
        return authenticator is not None and authenticator.verified

    def list(self) -> List[Authenticator]:
        return self._authenticators.values()

    def __contains__(self, identity: str) -> bool:
        return identity in self._authenticators

    def __len__(self) -> int:
        return len(self._authenticators)
