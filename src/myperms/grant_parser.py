import re
from typing import Optional, Tuple

from myperms.error import GrantParseError
from myperms.grants import (
    Grant,
    RoleGrant,
    RoutineKind,
    RoutinePrivilegeGrant,
    TablePrivilegeGrant,
)
from myperms.identity import Identity, LoginIdentity, RoleIdentity
from myperms.logger import GLOBAL_LOGGER as logger
from myperms.privileges import extract_privilege_types, normalize_privileges

PARTIAL_REVOKES_URL = "https://dev.mysql.com/doc/refman/8.0/en/partial-revokes.html"

REQUIRE_REGEX = re.compile(r".*REQUIRE\s+(.*)")

# Greedy so that the last TO in the line is used, e.g. for PROXY grants
IDENTITY_TEXT_REGEX = re.compile(r".*\bTO\s+(.+)")

LOGIN_REGEX = re.compile(r"""^(['`"])([^'`"]*)\1@(['`"])([^'`"]*)\3""")

ROLE_REGEX = re.compile(r"""^(['`"])([^'`"]+)\1""")

GRANT_OPTION_REGEX = re.compile(r"\bGRANT OPTION\b|\bADMIN OPTION\b")

# Checked in this order, the first pattern that matches decides the grant type
ROLE_GRANT_REGEX = re.compile(r"^GRANT\s+((?:(?!\sON\s).)+?)\s+TO\s+(.+)$")

# A back-ticked name may contain spaces
ROUTINE_NAME_PATTERN = r"(?:`[^`]*`|[^\s.`])+(?:\.(?:`[^`]*`|[^\s`])+)?"

ROUTINE_GRANT_REGEX = re.compile(
    r"^GRANT\s+(.+?)\s+ON\s+(FUNCTION|PROCEDURE)\s+("
    + ROUTINE_NAME_PATTERN
    + r")\s+TO\s+(.+)$"
)

TABLE_GRANT_REGEX = re.compile(r"^GRANT\s+(.+?)\s+ON\s+(.+?)\s+TO\s+(.+)$")

OBJECT_REFERENCE_REGEX = re.compile(r"^(`[^`]*`|[^.]*)\.(.*)$")

ROLE_NAME_TRIM_CHARS = "`@%\"' "

NAME_TRIM_CHARS = "`\"'"


def parse_identity(grant_str: str) -> Identity:
    """
    Find the user or role a SHOW GRANTS row was granted to.

    'bob'@'%' and `bob`@`%` both give a LoginIdentity, a lone quoted name
    gives a RoleIdentity.
    """
    identity_match = IDENTITY_TEXT_REGEX.match(grant_str)
    if not identity_match:
        raise GrantParseError(grant_str)
    identity_text = identity_match.group(1).strip()

    login_match = LOGIN_REGEX.match(identity_text)
    if login_match:
        return LoginIdentity(
            name=login_match.group(2).strip(), host=login_match.group(4).strip()
        )

    role_match = ROLE_REGEX.match(identity_text)
    if role_match:
        return RoleIdentity(name=role_match.group(2).strip())

    raise GrantParseError(grant_str)


def split_object_reference(reference: str) -> Tuple[str, str]:
    """
    Split `db`.`table` into its unquoted parts.

        `app`.`users` -> ("app", "users")
        *.*           -> ("*", "*")
        `app`         -> ("app", "")
    """
    match = OBJECT_REFERENCE_REGEX.match(reference.strip())
    if not match:
        return reference.strip(NAME_TRIM_CHARS), ""
    database, table = match.group(1), match.group(2)
    return database.strip(NAME_TRIM_CHARS), table.strip(NAME_TRIM_CHARS)


def parse_grant_from_row(grant_str: str) -> Optional[Grant]:
    """
    Turn a row returned by SHOW GRANTS into a grant.

    Returns None for partial revoke rows (REVOKE ... ON ...), which are not
    modelled. Raises a GrantParseError when the row matches no known form.
    """
    grant_str = grant_str.strip()

    if grant_str.startswith("REVOKE"):
        logger.warning(
            "Partial revokes are not fully supported and lead to unexpected "
            f"behavior. Consult {PARTIAL_REVOKES_URL} on how to disable them. "
            f"Relevant partial revoke: {grant_str}"
        )
        return None

    tls_option = ""
    require_match = REQUIRE_REGEX.match(grant_str)
    if require_match:
        tls_option = require_match.group(1)

    identity = parse_identity(grant_str)
    grant_option = GRANT_OPTION_REGEX.search(grant_str) is not None

    role_match = ROLE_GRANT_REGEX.match(grant_str)
    if role_match:
        return RoleGrant(
            roles=[
                role.strip(ROLE_NAME_TRIM_CHARS)
                for role in role_match.group(1).split(",")
            ],
            grant_option=grant_option,
            identity=identity,
            tls_option=tls_option,
        )

    routine_match = ROUTINE_GRANT_REGEX.match(grant_str)
    if routine_match:
        # The routine is referenced by a single token, it is not split
        # into database and name here
        routine_name = routine_match.group(3).strip(NAME_TRIM_CHARS)
        return RoutinePrivilegeGrant(
            database=routine_name,
            routine_kind=RoutineKind(routine_match.group(2)),
            routine_name=routine_name,
            privileges=normalize_privileges(
                extract_privilege_types(routine_match.group(1))
            ),
            grant_option=grant_option,
            identity=identity,
            tls_option=tls_option,
        )

    table_match = TABLE_GRANT_REGEX.match(grant_str)
    if table_match:
        database, table = split_object_reference(table_match.group(2))
        return TablePrivilegeGrant(
            database=database,
            table=table,
            privileges=normalize_privileges(
                extract_privilege_types(table_match.group(1))
            ),
            grant_option=grant_option,
            identity=identity,
            tls_option=tls_option,
        )

    raise GrantParseError(grant_str)
