from typing import Dict, List, Optional, Tuple

from myperms.declared import parse_import_id
from myperms.error import CapabilityError, ConflictError, NonexistentGrantError
from myperms.grant_parser import parse_grant_from_row
from myperms.grants import Grant, GrantKind, routine_reference
from myperms.identity import Identity
from myperms.logger import GLOBAL_LOGGER as logger
from myperms.mysql_connector import MySQLConnector


def diff_privileges(
    old_privileges: List[str], new_privileges: List[str]
) -> Tuple[List[str], List[str]]:
    """
    Compare two canonical privilege lists as sets.

    Returns a tuple (added, removed) where each list keeps the order of the
    list it was taken from:
        diff_privileges(["SELECT", "INSERT"], ["SELECT", "UPDATE"]) ->
            (["UPDATE"], ["INSERT"])
    """
    added = [
        privilege for privilege in new_privileges if privilege not in old_privileges
    ]
    removed = [
        privilege for privilege in old_privileges if privilege not in new_privileges
    ]
    return (added, removed)


def privilege_update_statements(
    grant: Grant, old_privileges: List[str], new_privileges: List[str]
) -> List[str]:
    """
    Generate the statements that take `grant` from old_privileges to
    new_privileges: a partial revoke for the removed privileges and a full
    GRANT of all the privileges of `grant` if anything was added.
    """
    added, removed = diff_privileges(old_privileges, new_privileges)
    statements = []

    if removed:
        if not grant.supports_partial_revoke:
            raise CapabilityError(
                f"grant {grant.get_id()} does not support partial privilege revokes"
            )
        statements.append(grant.sql_partial_revoke_statement(removed))

    if added:
        statements.append(grant.sql_grant_statement())

    return statements


class GrantReconciler:
    """
    Compares grants declared for a user or role with the grants the server
    reports and runs the statements needed to bring them in line.

    Nothing is cached: every operation reads the current grants again.
    """

    def __init__(self, conn: Optional[MySQLConnector] = None):
        self.conn = conn if conn is not None else MySQLConnector()

    def show_user_grants(self, identity: Identity) -> List[Grant]:
        """
        Get all the grants held by `identity`.

        Rows for other accounts (e.g. Percona also returns the grants of
        'bob'@'%' when asked for 'bob'@'10.0.0.1') are skipped.
        """
        try:
            rows = self.conn.show_grants(identity.sql_string())
        except NonexistentGrantError:
            return []

        grants = []
        for row in rows:
            grant = parse_grant_from_row(row)
            if grant is None:
                continue

            if grant.identity != identity:
                logger.debug(
                    f"Skipping grant for {grant.identity} as it doesn't match {identity}"
                )
                continue
            grants.append(grant)

        logger.debug(f"Parsed grants are: {grants}")
        return grants

    def has_conflicting_grants(self, desired_grant: Grant) -> bool:
        """
        Check whether the server already holds a grant of the same type and
        grant option for the same user or role, which creating `desired_grant`
        would silently take over.
        """
        for grant in self.show_user_grants(desired_grant.identity):
            if grant.grant_option != desired_grant.grant_option:
                continue
            if grant.kind == desired_grant.kind:
                return True
        return False

    def match_grant(
        self,
        identity: Identity,
        database: str = "",
        table: str = "",
        grant_option: bool = False,
    ) -> Optional[Grant]:
        """
        Find the first grant of `identity` with the given grant option,
        database and table. Grant types without a database (or table) only
        match an empty database (or table).
        """
        for grant in self.show_user_grants(identity):
            if grant.grant_option != grant_option:
                continue

            grant_database = "" if grant.kind == GrantKind.ROLE else grant.database
            if grant_database != database:
                continue

            grant_table = grant.table if grant.kind == GrantKind.TABLE else ""
            if grant_table != table:
                continue

            return grant

        return None

    def find_live_grant(self, grant: Grant) -> Optional[Grant]:
        """Find the grant on the server that targets the same object as `grant`"""
        for live_grant in self.show_user_grants(grant.identity):
            if (
                live_grant.kind != grant.kind
                or live_grant.grant_option != grant.grant_option
            ):
                continue

            if grant.kind == GrantKind.TABLE:
                if (live_grant.database, live_grant.table) == (
                    grant.database,
                    grant.table,
                ):
                    return live_grant
            elif grant.kind == GrantKind.ROUTINE:
                if (
                    live_grant.routine_kind == grant.routine_kind
                    and routine_reference(live_grant) == routine_reference(grant)
                ):
                    return live_grant
            else:
                return live_grant

        return None

    def generate_grant_commands(self, grant: Grant) -> List[Dict]:
        """
        Generate the SQL commands needed for the server to hold `grant`.

        Returns a list of {"already_granted": bool, "sql": str} dicts. A grant
        that is already in place is returned with already_granted set so it
        can be shown in a diff.
        """
        if grant.kind == GrantKind.ROLE:
            held_roles = [
                role
                for live_grant in self.show_user_grants(grant.identity)
                if live_grant.kind == GrantKind.ROLE
                and live_grant.grant_option == grant.grant_option
                for role in live_grant.roles
            ]
            missing_roles = [role for role in grant.roles if role not in held_roles]
            return [
                {
                    "already_granted": not missing_roles,
                    "sql": grant.sql_grant_statement(),
                }
            ]

        live_grant = self.find_live_grant(grant)
        if live_grant is None:
            return [{"already_granted": False, "sql": grant.sql_grant_statement()}]

        statements = privilege_update_statements(
            grant, live_grant.privileges, grant.privileges
        )
        if not statements:
            return [{"already_granted": True, "sql": grant.sql_grant_statement()}]

        return [{"already_granted": False, "sql": sql} for sql in statements]

    def create_grant(self, grant: Grant) -> str:
        """
        Grant `grant` and return its id.

        Fails if the server can not hold role grants or if an unmanaged grant
        of the same shape exists, in which case it has to be imported first.
        """
        if grant.kind == GrantKind.ROLE and not self.conn.supports_roles():
            raise CapabilityError(
                "role grants are not supported by this version of MySQL"
            )

        if self.has_conflicting_grants(grant):
            raise ConflictError(grant.identity.sql_string())

        sql = grant.sql_grant_statement()
        logger.info(f"Executing statement: {sql}")
        self.conn.execute(sql)

        return grant.get_id()

    def read_grant(self, grant: Grant) -> Optional[Grant]:
        if not self.show_user_grants(grant.identity):
            logger.warning(f"GRANT not found for {grant.identity}")
            return None
        return grant

    def update_grant(
        self, grant: Grant, old_privileges: List[str], new_privileges: List[str]
    ) -> List[str]:
        """
        Move a privilege grant from old_privileges to new_privileges in place.

        Returns the statements that ran.
        """
        statements = privilege_update_statements(grant, old_privileges, new_privileges)
        for sql in statements:
            self.run_statement(sql)
        return statements

    def run_statement(self, sql: str) -> None:
        """
        Execute a GRANT or REVOKE statement. Revoking something the server
        does not hold counts as done.
        """
        logger.debug(f"SQL: {sql}")
        try:
            self.conn.execute(sql)
        except NonexistentGrantError as exc:
            logger.debug(f"Grant already revoked ({sql}): {exc.error}")

    def delete_grant(self, grant: Grant) -> None:
        self.run_statement(grant.sql_revoke_statement())

    def import_grant(self, import_id: str) -> Optional[Grant]:
        """
        Find the grant named by an import id of the form
        user@host@database@table, with a trailing @ for the grant option.
        """
        identity, database, table, grant_option = parse_import_id(import_id)
        return self.match_grant(identity, database, table, grant_option)
