from typing import Dict, List

import cerberus
import yaml

from myperms.error import SpecLoadingError
from myperms.spec_schemas import MYSQL_SPEC_GRANT_SCHEMA, MYSQL_SPEC_SCHEMA
from myperms.types import MyPermsSpecSchema

VALIDATION_ERR_MSG = 'Spec error: grant #{} "{}", field "{}": {}'


def describe_grant(config: Dict) -> str:
    """A short name for a grant entry to use in error messages"""
    if "user" in config:
        return f"{config['user']}@{config.get('host', 'localhost')}"
    return str(config.get("role", "?"))


def ensure_valid_schema(spec: Dict) -> List[str]:
    """
    Ensure that the provided spec has no schema errors.

    Returns a list with all the errors found.
    """
    error_messages = []

    validator = cerberus.Validator(yaml.safe_load(MYSQL_SPEC_SCHEMA))
    validator.validate(spec)
    for entity_type, err_msg in validator.errors.items():
        if isinstance(err_msg[0], str):
            error_messages.append(f"Spec error: {entity_type}: {err_msg[0]}")
            continue

        for error in err_msg[0].values():
            error_messages.append(f"Spec error: {entity_type}: {error[0]}")

    if error_messages:
        return error_messages

    grant_validator = cerberus.Validator(yaml.safe_load(MYSQL_SPEC_GRANT_SCHEMA))
    for index, config in enumerate(spec["grants"], start=1):
        grant_validator.validate(config)
        for field, err_msg in grant_validator.errors.items():
            error_messages.append(
                VALIDATION_ERR_MSG.format(
                    index, describe_grant(config), field, err_msg[0]
                )
            )

    return error_messages


def load_spec(spec_path: str) -> MyPermsSpecSchema:
    """
    Load a grants specification from a file.

    If the file is not found or at least an error is found during validation,
    raise a SpecLoadingError with the appropriate error messages.

    Returns the spec as a dictionary if everything is OK
    """
    try:
        with open(spec_path, "r") as stream:
            spec = yaml.safe_load(stream)
    except FileNotFoundError:
        raise SpecLoadingError(f"Spec File {spec_path} not found")

    if not isinstance(spec, dict):
        raise SpecLoadingError(f"Spec File {spec_path} is empty or not a mapping")

    error_messages = ensure_valid_schema(spec)
    if error_messages:
        raise SpecLoadingError("\n".join(error_messages))

    return spec
