from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from quotedesk.engine.numbers import ZERO, to_decimal


class Role(str, Enum):
    ADMIN = "admin"
    SALESPERSON = "salesperson"

    @classmethod
    def parse(cls, raw: Any) -> "Role":
        # legacy user types "vendedor"/"funcionario" are salespeople;
        # anything unrecognised gets the least privilege
        if isinstance(raw, Role):
            return raw
        if str(raw or "").strip().lower() == "admin":
            return cls.ADMIN
        return cls.SALESPERSON


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str
    role: Role
    branch: str = ""
    commission_percent: Decimal = ZERO

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_orm(cls, user: Any) -> "CurrentUser":
        return cls(
            id=str(user.id),
            name=user.name,
            role=Role.parse(user.role),
            branch=user.branch or "",
            commission_percent=to_decimal(user.commission_percent),
        )
