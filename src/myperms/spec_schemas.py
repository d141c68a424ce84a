"""
This file describes the expected schema for a spec file.
These schemas are used to both parse and validate spec files.
"""

MYSQL_SPEC_SCHEMA = """
    version:
        type: string
        required: False

    grants:
        type: list
        required: True
        schema:
            type: dict
    """

# user and role are both required but exclude each other, so exactly one
# of them has to be given. The same goes for database (and privileges)
# and roles.
MYSQL_SPEC_GRANT_SCHEMA = """
    user:
        type: string
        empty: False
        required: True
        excludes: role
    host:
        type: string
        empty: False
        excludes: role
    role:
        type: string
        empty: False
        required: True
        excludes:
            - user
            - host
    database:
        type: string
        required: True
        excludes: roles
    table:
        type: string
    privileges:
        type: list
        required: True
        empty: False
        excludes: roles
        schema:
            type: string
    roles:
        type: list
        required: True
        empty: False
        excludes:
            - privileges
            - database
        schema:
            type: string
    grant:
        type: boolean
    tls_option:
        type: string
    """
