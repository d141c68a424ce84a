class MyPermsError(Exception):
    """Base class for all errors raised by myperms"""

    pass


class SpecLoadingError(MyPermsError):
    """Raise when the spec file can not be loaded"""

    pass


class ValidationError(MyPermsError):
    """Raise when declared grant fields or an import id are not valid"""

    pass


class GrantParseError(MyPermsError):
    """Raise when a SHOW GRANTS row can not be turned into a grant"""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"failed to parse grant statement: {line}")


class CapabilityError(MyPermsError):
    """
    Raise when the server or the grant type can not do what was asked,
    e.g. role grants on a server without roles or a partial revoke on a
    role grant.
    """

    pass


class ConflictError(MyPermsError):
    """Raise when an unmanaged grant of the same shape already exists"""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(
            f"user/role {identity} already has unmanaged grant - import it first"
        )


class QueryError(MyPermsError):
    """Raise when running a statement against the server fails"""

    def __init__(self, sql: str, error: Exception, code: int = None):
        self.sql = sql
        self.error = error
        self.code = code
        super().__init__(f"Error running SQL ({sql}): {error}")


class NonexistentGrantError(QueryError):
    """
    Raise when the server reports that there is no such grant.

    Callers treat this as an idempotent outcome rather than a failure.
    """

    pass
