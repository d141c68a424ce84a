import re
from typing import Iterable, List

# MySQL reports USAGE for an account that holds no privileges at that level
NO_PRIVILEGES = "USAGE"

ALL_PRIVILEGES = "ALL PRIVILEGES"

IGNORED_CHARACTERS_REGEX = re.compile(r"[ `]")

COLUMN_LIST_REGEX = re.compile(r"^([^(]*)\((.*)\)$")


def extract_privilege_types(privileges: str) -> List[str]:
    """
    Split a comma separated privilege list as found in a GRANT statement.

    Commas inside a column list are not separators and whitespace at the
    start of a privilege is dropped, for example:
        extract_privilege_types("SELECT (a, b), INSERT") ->
            ["SELECT (a, b)", "INSERT"]
    """
    privilege_types = []

    # Column lists never nest, so a flag is enough to track them
    in_parentheses = False
    current = []
    for char in privileges:
        if char == ",":
            if in_parentheses:
                current.append(char)
            else:
                privilege_types.append("".join(current))
                current = []
        elif char == "(":
            in_parentheses = True
            current.append(char)
        elif char == ")":
            in_parentheses = False
            current.append(char)
        elif char.isspace() and not current:
            continue
        else:
            current.append(char)
    privilege_types.append("".join(current))

    return privilege_types


def normalize_column_order(privilege: str) -> str:
    """
    Upper case a privilege and sort the column list of a column level
    privilege. MySQL column names are case insensitive, so they are upper
    cased too.

        select(b,a,c) -> SELECT(A, B, C)
        delete        -> DELETE
    """
    privilege = privilege.upper()
    match = COLUMN_LIST_REGEX.match(privilege)
    if not match:
        return privilege

    columns = sorted(column.strip("` ") for column in match.group(2).split(","))
    return f"{match.group(1)}({', '.join(columns)})"


def remove_useless_privileges(privileges: Iterable[str]) -> List[str]:
    return [privilege for privilege in privileges if privilege != NO_PRIVILEGES]


def normalize_privileges(privileges: Iterable[str]) -> List[str]:
    """
    Bring a list of privileges to the form used for comparisons.

    Spaces and backticks are dropped, privileges are upper cased, ALL becomes
    ALL PRIVILEGES and column lists are sorted. The order of the privileges
    themselves is kept as given. USAGE is removed since it grants nothing.
    """
    normalized = []
    for privilege in privileges:
        privilege = IGNORED_CHARACTERS_REGEX.sub("", privilege)
        privilege = normalize_column_order(privilege)
        if privilege in ("ALL", "ALLPRIVILEGES"):
            privilege = ALL_PRIVILEGES
        normalized.append(privilege)

    return remove_useless_privileges(normalized)
