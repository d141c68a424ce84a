from typing import Dict, List, Optional

import click

from myperms.declared import parse_declared_grant
from myperms.error import CapabilityError, SpecLoadingError, ValidationError
from myperms.grant_reconciler import GrantReconciler
from myperms.grants import Grant, GrantKind
from myperms.logger import GLOBAL_LOGGER as logger
from myperms.mysql_connector import MySQLConnector
from myperms.spec_file_loader import load_spec

GRANT_ERR_MSG = "Spec error: grant #{}: {}"


class MySQLSpecLoader:
    def __init__(
        self,
        spec_path: str,
        conn: Optional[MySQLConnector] = None,
        users: Optional[List[str]] = None,
    ) -> None:
        """
        Load a spec file and turn its entries into grants.

        users: only keep the grants of these users or roles, e.g.
            ["bob", "reporting"]. All grants are kept when empty.
        """
        self.conn = conn

        # Load the specification file and check for (syntactical) errors
        click.secho("Loading spec file", fg="green")
        self.spec = load_spec(spec_path)

        click.secho("Checking spec file for errors", fg="green")
        self.grants = self.generate_grants(users=users)

    def generate_grants(self, users: Optional[List[str]] = None) -> List[Grant]:
        """
        Convert every entry of the spec into a grant.

        Raises a SpecLoadingError with all the entries that could not be
        converted.
        """
        grants = []
        error_messages = []

        for index, config in enumerate(self.spec["grants"], start=1):
            try:
                grant = parse_declared_grant(**config)
            except ValidationError as exc:
                error_messages.append(GRANT_ERR_MSG.format(index, exc))
                continue

            if users and grant.identity.name not in users:
                logger.debug(
                    f"Skipping grant #{index} for {grant.identity}, not in {users}"
                )
                continue
            grants.append(grant)

        if error_messages:
            raise SpecLoadingError("\n".join(error_messages))

        return grants

    def get_reconciler(self) -> GrantReconciler:
        if self.conn is None:
            self.conn = MySQLConnector()
        return GrantReconciler(self.conn)

    def check_role_support(self, reconciler: GrantReconciler) -> None:
        role_grants = [grant for grant in self.grants if grant.kind == GrantKind.ROLE]
        if not role_grants:
            logger.debug("No role grants in spec, skipping server version check.")
            return

        click.secho("Checking that the server supports roles", fg="green")
        if not reconciler.conn.supports_roles():
            raise CapabilityError(
                "role grants are not supported by this version of MySQL: "
                + ", ".join(grant.get_id() for grant in role_grants)
            )

    def generate_permission_queries(self) -> List[Dict]:
        """
        Starting point to generate all the permission queries.

        For each grant in the spec the grants of its user or role are read
        from the server and compared with it.

        Returns all the SQL commands as a list.
        """
        reconciler = self.get_reconciler()
        self.check_role_support(reconciler)

        sql_commands: List[Dict] = []
        with click.progressbar(self.grants) as grants_bar:
            for grant in grants_bar:
                logger.info(f"Fetching grants for {grant.identity}")
                sql_commands.extend(reconciler.generate_grant_commands(grant))

        return sql_commands

    def generate_revoke_queries(self) -> List[Dict]:
        """The REVOKE statements for every grant in the spec"""
        return [
            {"already_granted": False, "sql": grant.sql_revoke_statement()}
            for grant in self.grants
        ]
