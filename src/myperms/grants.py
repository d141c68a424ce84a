from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from myperms.identity import Identity, LoginIdentity, RoleIdentity

GRANT_PRIVILEGES_TEMPLATE = "GRANT {privileges} ON {resource} TO {identity}"

REVOKE_PRIVILEGES_TEMPLATE = "REVOKE {privileges} ON {resource} FROM {identity}"

GRANT_ROLES_TEMPLATE = "GRANT {roles} TO {identity}"

REVOKE_ROLES_TEMPLATE = "REVOKE {roles} FROM {identity}"

REQUIRE_TEMPLATE = " REQUIRE {tls_option}"

WITH_GRANT_OPTION = " WITH GRANT OPTION"

WITH_ADMIN_OPTION = " WITH ADMIN OPTION"


class GrantKind(Enum):
    TABLE = "table"
    ROUTINE = "routine"
    ROLE = "role"


class RoutineKind(Enum):
    PROCEDURE = "PROCEDURE"
    FUNCTION = "FUNCTION"


def quote_database(database: str) -> str:
    if database != "*" and not database.endswith("`"):
        return f"`{database}`"
    return database


def quote_table(table: str) -> str:
    if table in ("*", ""):
        return "*"
    return f"`{table}`"


def require_clause(tls_option: str) -> str:
    if tls_option and tls_option.lower() != "none":
        return REQUIRE_TEMPLATE.format(tls_option=tls_option)
    return ""


def identity_id(identity: Identity, database: Optional[str] = None) -> str:
    """
    Build the stable id of a grant from its identity and, for privilege
    grants, the rendered database.

        'bob'@'%' on `app`  -> bob@%:`app`
        'reporting' on *    -> reporting:*
    """
    if isinstance(identity, LoginIdentity):
        grant_id = f"{identity.name}@{identity.host}"
    elif isinstance(identity, RoleIdentity):
        grant_id = identity.name
    else:
        raise TypeError(f"Unknown user or role: {identity!r}")

    if database is None:
        return grant_id
    return f"{grant_id}:{database}"


@dataclass
class TablePrivilegeGrant:
    """
    Privileges held on a database or a table, e.g.
    GRANT SELECT, INSERT ON `app`.`users` TO 'bob'@'%'

    A database of `*` means all databases and a table of `*` all tables.
    """

    database: str
    table: str
    privileges: List[str]
    grant_option: bool
    identity: Identity
    tls_option: str = ""

    kind = GrantKind.TABLE
    supports_partial_revoke = True

    def get_id(self) -> str:
        return identity_id(self.identity, self.get_database())

    def get_database(self) -> str:
        return quote_database(self.database)

    def get_table(self) -> str:
        return quote_table(self.table)

    def resource(self) -> str:
        return f"{self.get_database()}.{self.get_table()}"

    def sql_grant_statement(self) -> str:
        sql = GRANT_PRIVILEGES_TEMPLATE.format(
            privileges=", ".join(self.privileges),
            resource=self.resource(),
            identity=self.identity.sql_string(),
        )
        sql += require_clause(self.tls_option)
        if self.grant_option:
            sql += WITH_GRANT_OPTION
        return sql

    def sql_revoke_statement(self) -> str:
        return self.sql_partial_revoke_statement(self.privileges)

    def sql_partial_revoke_statement(self, privileges: List[str]) -> str:
        sql = REVOKE_PRIVILEGES_TEMPLATE.format(
            privileges=", ".join(privileges),
            resource=self.resource(),
            identity=self.identity.sql_string(),
        )
        if self.grant_option:
            sql += WITH_GRANT_OPTION
        return sql


@dataclass
class RoutinePrivilegeGrant:
    """
    Privileges held on a stored procedure or function, e.g.
    GRANT EXECUTE ON PROCEDURE `app`.refresh TO 'reporting'
    """

    database: str
    routine_kind: RoutineKind
    routine_name: str
    privileges: List[str]
    grant_option: bool
    identity: Identity
    tls_option: str = ""

    kind = GrantKind.ROUTINE
    supports_partial_revoke = True

    def get_id(self) -> str:
        return identity_id(self.identity, self.get_database())

    def get_database(self) -> str:
        return quote_database(self.database)

    def resource(self) -> str:
        return f"{self.routine_kind.value} {self.get_database()}.{self.routine_name}"

    def sql_grant_statement(self) -> str:
        sql = GRANT_PRIVILEGES_TEMPLATE.format(
            privileges=", ".join(self.privileges),
            resource=self.resource(),
            identity=self.identity.sql_string(),
        )
        sql += require_clause(self.tls_option)
        if self.grant_option:
            sql += WITH_GRANT_OPTION
        return sql

    def sql_revoke_statement(self) -> str:
        return self.sql_partial_revoke_statement(self.privileges)

    def sql_partial_revoke_statement(self, privileges: List[str]) -> str:
        sql = REVOKE_PRIVILEGES_TEMPLATE.format(
            privileges=", ".join(privileges),
            resource=self.resource(),
            identity=self.identity.sql_string(),
        )
        if self.grant_option:
            sql += WITH_GRANT_OPTION
        return sql


def routine_reference(grant: RoutinePrivilegeGrant) -> str:
    """
    Unquoted db.routine reference of a routine grant.

    Grants read from the server carry the whole reference in both the
    database and the routine name.
    """
    if grant.database == grant.routine_name:
        return grant.routine_name.replace("`", "")
    return f"{grant.database}.{grant.routine_name}"


@dataclass
class RoleGrant:
    """
    Membership of a user or role in other roles, e.g.
    GRANT 'editor', 'viewer' TO 'bob'@'%' WITH ADMIN OPTION

    Memberships are always revoked as a whole.
    """

    roles: List[str]
    grant_option: bool
    identity: Identity
    tls_option: str = ""

    kind = GrantKind.ROLE
    supports_partial_revoke = False

    def get_id(self) -> str:
        return identity_id(self.identity)

    def sql_grant_statement(self) -> str:
        sql = GRANT_ROLES_TEMPLATE.format(
            roles=", ".join(self.roles), identity=self.identity.sql_string()
        )
        sql += require_clause(self.tls_option)
        if self.grant_option:
            sql += WITH_ADMIN_OPTION
        return sql

    def sql_revoke_statement(self) -> str:
        return REVOKE_ROLES_TEMPLATE.format(
            roles=", ".join(self.roles), identity=self.identity.sql_string()
        )


Grant = Union[TablePrivilegeGrant, RoutinePrivilegeGrant, RoleGrant]
