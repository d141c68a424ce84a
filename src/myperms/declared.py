import re
from typing import Any, Dict, Iterable, Optional, Tuple

from myperms.error import ValidationError
from myperms.grants import (
    Grant,
    GrantKind,
    RoleGrant,
    RoutineKind,
    RoutinePrivilegeGrant,
    TablePrivilegeGrant,
    routine_reference,
)
from myperms.identity import Identity, LoginIdentity, RoleIdentity
from myperms.privileges import normalize_privileges

DEFAULT_HOST = "localhost"

DEFAULT_TABLE = "*"

DEFAULT_TLS_OPTION = "NONE"

ROUTINE_WITHOUT_DATABASE_REGEX = re.compile(
    r"^(function|procedure) ([^.]*)$", re.IGNORECASE
)

ROUTINE_WITH_DATABASE_REGEX = re.compile(
    r"^(function|procedure) ([^.]*)\.([^.]*)$", re.IGNORECASE
)

IMPORT_ID_ERR_MSG = (
    "wrong ID format {} - expected user@host@database@table (and optionally "
    "ending @ to signify grant option) where some parts can be empty"
)


def parse_declared_identity(
    user: Optional[str] = None,
    host: Optional[str] = DEFAULT_HOST,
    role: Optional[str] = None,
) -> Identity:
    if user and host:
        return LoginIdentity(name=user, host=host)
    if role:
        return RoleIdentity(name=role)
    raise ValidationError("One of user/host or role is required")


def parse_declared_grant(
    user: Optional[str] = None,
    host: Optional[str] = DEFAULT_HOST,
    role: Optional[str] = None,
    database: str = "",
    table: str = DEFAULT_TABLE,
    privileges: Optional[Iterable[str]] = None,
    roles: Optional[Iterable[str]] = None,
    grant: bool = False,
    tls_option: str = DEFAULT_TLS_OPTION,
) -> Grant:
    """
    Build a grant out of the fields a user declares, e.g. in a spec file:

        user: bob                       role: reporting
        host: "%"                       database: PROCEDURE app.refresh
        database: app                   privileges: [EXECUTE]
        table: users
        privileges: [SELECT, INSERT]

    Declaring `roles` gives a role grant, a database of the form
    `FUNCTION|PROCEDURE [db.]name` a routine grant (the name is taken from
    `table` when no database is given) and anything else a table grant.
    """
    identity = parse_declared_identity(user=user, host=host, role=role)

    if roles:
        return RoleGrant(
            roles=list(roles),
            grant_option=grant,
            identity=identity,
            tls_option=tls_option,
        )

    normalized_privileges = normalize_privileges(privileges or [])
    if not normalized_privileges:
        raise ValidationError(
            "At least one privilege other than USAGE is required, or use roles"
        )

    with_database = ROUTINE_WITH_DATABASE_REGEX.match(database)
    without_database = ROUTINE_WITHOUT_DATABASE_REGEX.match(database)
    if with_database:
        return RoutinePrivilegeGrant(
            database=with_database.group(2),
            routine_kind=RoutineKind(with_database.group(1).upper()),
            routine_name=with_database.group(3),
            privileges=normalized_privileges,
            grant_option=grant,
            identity=identity,
            tls_option=tls_option,
        )
    if without_database:
        return RoutinePrivilegeGrant(
            database=without_database.group(2),
            routine_kind=RoutineKind(without_database.group(1).upper()),
            routine_name=table,
            privileges=normalized_privileges,
            grant_option=grant,
            identity=identity,
            tls_option=tls_option,
        )

    return TablePrivilegeGrant(
        database=database,
        table=table,
        privileges=normalized_privileges,
        grant_option=grant,
        identity=identity,
        tls_option=tls_option,
    )


def grant_to_fields(grant: Grant) -> Dict[str, Any]:
    """
    The inverse of parse_declared_grant: the fields that declare `grant`.
    """
    fields: Dict[str, Any] = {"grant": grant.grant_option}

    if grant.kind == GrantKind.TABLE:
        fields.update(
            {
                "database": grant.database,
                "table": grant.table,
                "privileges": list(grant.privileges),
            }
        )
    elif grant.kind == GrantKind.ROUTINE:
        fields.update(
            {
                "database": f"{grant.routine_kind.value} {routine_reference(grant)}",
                "table": "",
                "privileges": list(grant.privileges),
            }
        )
    else:
        fields["roles"] = list(grant.roles)
    fields["tls_option"] = grant.tls_option

    if isinstance(grant.identity, LoginIdentity):
        fields.update({"user": grant.identity.name, "host": grant.identity.host})
    elif isinstance(grant.identity, RoleIdentity):
        fields["role"] = grant.identity.name
    else:
        raise TypeError(f"Unknown user or role: {grant.identity!r}")

    return fields


def parse_import_id(import_id: str) -> Tuple[LoginIdentity, str, str, bool]:
    """
    Split an import id into (identity, database, table, grant_option).

        bob@%@app@users   -> (LoginIdentity("bob", "%"), "app", "users", False)
        bob@%@app@users@  -> (LoginIdentity("bob", "%"), "app", "users", True)
    """
    parts = import_id.split("@")
    if len(parts) not in (4, 5):
        raise ValidationError(IMPORT_ID_ERR_MSG.format(import_id))

    user, host, database, table = parts[:4]
    return (
        LoginIdentity(name=user, host=host),
        database,
        table,
        len(parts) == 5,
    )
