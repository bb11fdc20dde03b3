"""
Request identity passed explicitly into every service call.
"""

from pydantic import BaseModel


class RequestContext(BaseModel):
    """Resolved caller identity: who is asking and whether they may administer."""

    email: str | None = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.email)


ANONYMOUS = RequestContext()
