import os
import re
from typing import Any, Dict, List, Optional

import sqlalchemy
from packaging.version import Version
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError

from myperms.error import NonexistentGrantError, QueryError
from myperms.logger import GLOBAL_LOGGER as logger

# ER_NONEXISTING_GRANT, ER_NONEXISTING_TABLE_GRANT, ER_NONEXISTING_PROC_GRANT
NONEXISTENT_GRANT_ERROR_CODES = (1141, 1147, 1403)

ROLES_REQUIRED_VERSION = Version("8.0.0")

VERSION_REGEX = re.compile(r"^(\d+(?:\.\d+)*)")

DEFAULT_PORT = 3306


class MySQLConnector:
    """
    Runs the statements needed to read and change grants on a MySQL server.

    Connection settings are read from PERMISSION_BOT_* environment variables
    unless a config dict with the same keys (lower case, without the prefix)
    is given.
    """

    def __init__(self, config: Optional[Dict] = None) -> None:
        if not config:
            config = {
                "user": os.getenv("PERMISSION_BOT_USER"),
                "password": os.getenv("PERMISSION_BOT_PASSWORD"),
                "host": os.getenv("PERMISSION_BOT_HOST"),
                "port": os.getenv("PERMISSION_BOT_PORT"),
                "database": os.getenv("PERMISSION_BOT_DATABASE"),
                "ssl_ca": os.getenv("PERMISSION_BOT_SSL_CA"),
            }

        url = URL.create(
            "mysql+pymysql",
            username=config.get("user"),
            password=config.get("password"),
            host=config.get("host"),
            port=int(config.get("port") or DEFAULT_PORT),
            database=config.get("database") or None,
        )

        if config.get("ssl_ca"):
            self.engine = sqlalchemy.create_engine(
                url, connect_args={"ssl": {"ca": config["ssl_ca"]}}
            )
        else:
            self.engine = sqlalchemy.create_engine(url)

    @staticmethod
    def error_code(error: DBAPIError) -> Optional[int]:
        """Get the MySQL error number out of a wrapped driver error"""
        args = getattr(error.orig, "args", None)
        if args and isinstance(args[0], int):
            return args[0]
        return None

    def query_error(self, query: str, error: DBAPIError) -> QueryError:
        code = self.error_code(error)
        if code in NONEXISTENT_GRANT_ERROR_CODES:
            return NonexistentGrantError(query, error.orig, code)
        return QueryError(query, error.orig, code)

    def run_query(self, query: str) -> List[Any]:
        """
        Run a single statement and return the rows it produced, if any.

        Driver errors are raised as QueryError, or NonexistentGrantError when
        the server reports that the grant does not exist.
        """
        logger.debug(f"SQL: {query}")
        try:
            with self.engine.begin() as connection:
                result = connection.exec_driver_sql(query)
                if result.returns_rows:
                    return result.fetchall()
                return []
        except DBAPIError as exc:
            raise self.query_error(query, exc) from exc

    def execute(self, query: str) -> None:
        self.run_query(query)

    def show_grants(self, identity_sql: str) -> List[str]:
        """
        Return the raw rows of SHOW GRANTS for a user or role, e.g.
        show_grants("'bob'@'%'") ->
            ["GRANT USAGE ON *.* TO `bob`@`%`",
             "GRANT SELECT ON `app`.* TO `bob`@`%`"]
        """
        rows = self.run_query(f"SHOW GRANTS FOR {identity_sql}")
        return [row[0] for row in rows]

    def get_version(self) -> str:
        rows = self.run_query("SELECT VERSION() AS version")
        return rows[0][0]

    def supports_roles(self) -> bool:
        """Role grants exist starting with MySQL 8"""
        current_version = self.get_version()
        match = VERSION_REGEX.match(current_version)
        if not match:
            logger.warning(f"Could not parse server version {current_version}")
            return False
        return Version(match.group(1)) > ROLES_REQUIRED_VERSION
