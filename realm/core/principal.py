"""
The identity produced by a successful login.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Principal(BaseModel):
    """
    Authenticated user and the roles granted by the role query.

    The password is carried because host principals keep it; it is a
    SecretStr so reprs and logs show it masked.
    """
    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr
    # A NULL role value stays in its row position as None
    roles: Tuple[Optional[str], ...] = Field(default_factory=tuple)

    def has_role(self, role: str) -> bool:
        return role in self.roles
