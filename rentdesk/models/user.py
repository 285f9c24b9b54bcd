"""Console user model."""

from dataclasses import dataclass
from datetime import datetime

from rentdesk.models.enums import UserRole


@dataclass
class User:
    """The single account operating the console."""

    id: str
    email: str
    name: str
    role: UserRole = UserRole.LANDLORD
    is_active: bool = True
    created_at: datetime | None = None
