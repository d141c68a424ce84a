from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class LoginIdentity:
    """
    A MySQL account, i.e. a user name together with the host it connects from.

    The host is always rendered, even when it is the `%` wildcard, because
    `'bob'` and `'bob'@'%'` are not the same account on every server.
    """

    name: str
    host: str

    def sql_string(self) -> str:
        return f"'{self.name}'@'{self.host}'"

    def __str__(self) -> str:
        return self.sql_string()


@dataclass(frozen=True)
class RoleIdentity:
    """A MySQL 8 role, referenced by name only."""

    name: str

    def sql_string(self) -> str:
        return f"'{self.name}'"

    def __str__(self) -> str:
        return self.sql_string()


Identity = Union[LoginIdentity, RoleIdentity]
