"""
Access token claims.

A fixed set of named, typed claims. Tokens whose payload does not carry
every field are rejected instead of being accepted as a partial claim set.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AccessTokenClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    sub: UUID
    email: str
    company_id: UUID = Field(alias="companyId")
    role: str
    iat: int
    exp: int

    @property
    def user_id(self) -> UUID:
        return self.sub
