from pydantic import BaseModel, field_validator


class User(BaseModel):
    id: int
    username: str


class UserRecord(User):
    """A stored user, including the password hash. Never returned over HTTP."""

    password: str

    def public(self) -> User:
        return User(id=self.id, username=self.username)


class Credentials(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 100:
            raise ValueError("username must be 1-100 characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v or len(v) > 200:
            raise ValueError("password must be 1-200 characters")
        return v
