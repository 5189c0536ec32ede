# artprov/access.py
"""Owner-gated access control."""


class AccessControl:
    """
    Gates privileged actions to a single owner identity.

    The owner is configuration, not state: it is fixed for the lifetime
    of the instance.
    """

    def __init__(self, owner: str):
        if not owner:
            raise ValueError("Owner identity must be a non-empty string")
        self.owner = owner

    def verify_action(self, caller: str) -> bool:
        """Return True iff caller is the configured owner."""
        return caller == self.owner
