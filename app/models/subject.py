"""Subject model for registered users.

A subject is identified by the stable id issued by the upstream identity
provider. The profile holds just enough to build participant snapshots.
"""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class SubjectBase(SQLModel):
    email: str
    first_name: str = ""
    last_name: str = ""


class Subject(SubjectBase, table=True):
    """A user known to the registration service.

    Attributes:
        id: External identity id (primary key, not generated here).
        email: Contact email copied into participant snapshots.
        first_name: Given name.
        last_name: Family name.
        created_at: When the profile was first synced.
    """
    id: str = Field(primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email


class SubjectUpdate(SubjectBase):
    pass


class SubjectRead(SubjectBase):
    id: str
