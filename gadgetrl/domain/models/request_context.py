"""Requester identity passed explicitly into gating decisions."""

from pydantic import BaseModel, ConfigDict


class UserRef(BaseModel):
    """Identity of the user a module is being built for."""

    model_config = ConfigDict(frozen=True)

    user_id: int = 0
    logged_in: bool = False

    @property
    def is_registered(self) -> bool:
        """Logged in with a real account (anonymous users have id 0)."""
        return self.logged_in and self.user_id > 0

    @classmethod
    def anonymous(cls) -> "UserRef":
        return cls()


class RequestContext(BaseModel):
    """Per-request context for module resolution.

    ``user`` is None outside a web request, e.g. in maintenance jobs.
    """

    model_config = ConfigDict(frozen=True)

    user: UserRef | None = None
