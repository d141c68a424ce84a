from .error import (
    CapabilityError,
    ConflictError,
    GrantParseError,
    MyPermsError,
    NonexistentGrantError,
    QueryError,
    SpecLoadingError,
    ValidationError,
)

__version__ = "0.1.0"
