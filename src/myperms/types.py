from typing import List, TypedDict


class GrantSchema(TypedDict, total=False):
    # Either user (and host) or role
    user: str
    host: str
    role: str
    database: str
    table: str
    privileges: List[str]
    roles: List[str]
    grant: bool
    tls_option: str


class MyPermsSpecSchemaBase(TypedDict):
    grants: List[GrantSchema]


class MyPermsSpecSchema(MyPermsSpecSchemaBase, total=False):
    version: str
