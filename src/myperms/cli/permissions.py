import sys

import click
import yaml

from myperms import MyPermsError, SpecLoadingError
from myperms.declared import grant_to_fields
from myperms.error import QueryError
from myperms.grant_reconciler import GrantReconciler
from myperms.mysql_connector import MySQLConnector
from myperms.mysql_spec_loader import MySQLSpecLoader

from . import cli


PENDING_PREFIXES = {True: "[PENDING] ", False: "[SKIPPED] "}

RUN_STATUS_STYLES = {True: ("[SUCCESS] ", "green"), False: ("[ERROR] ", "red")}


def print_command(command, diff, dry=False):
    """
    Print a command prefixed with its run status and, with diff, whether it
    is new (+) or already granted.
    """
    diff_prefix = ""
    if diff:
        diff_prefix = "  " if command["already_granted"] else "+ "

    run_status = command.get("run_status")
    if run_status is None:
        run_prefix, color = PENDING_PREFIXES[dry], "cyan"
    else:
        run_prefix, color = RUN_STATUS_STYLES[run_status]

    click.secho(f"{diff_prefix}{run_prefix}{command['sql']};", fg=color)


def print_errors(exc):
    for line in str(exc).splitlines():
        click.secho(line, fg="red")


@cli.command()  # type: ignore
@click.argument("spec")
@click.option("--dry", help="Do not actually run, just check.", is_flag=True)
@click.option(
    "--diff", help="Show full diff, both new and existing permissions.", is_flag=True
)
@click.option(
    "--user",
    multiple=True,
    default=[],
    help="Run grants for specific users or roles. Usage: --user bob --user reporting.",
)
@click.pass_context
def run(ctx, spec, dry, diff, user, print_skipped=False):
    """
    Grant the permissions provided in the specification file
    """
    if ctx.parent.params.get("verbose", 0) >= 1:
        print_skipped = True

    spec_loader = load_specs(spec, user)
    try:
        sql_grant_queries = spec_loader.generate_permission_queries()
    except MyPermsError as exc:
        print_errors(exc)
        sys.exit(1)

    click.secho()
    if diff:
        click.secho(
            "SQL Commands generated for given spec file (Full diff with both new and already granted commands):"
        )
    else:
        click.secho("SQL Commands generated for given spec file:")
    click.secho()

    run_commands(
        spec_loader.get_reconciler(),
        sql_grant_queries,
        dry,
        diff,
        print_skipped=print_skipped,
    )


@cli.command()  # type: ignore
@click.argument("spec")
@click.option("--dry", help="Do not actually run, just check.", is_flag=True)
@click.option(
    "--user",
    multiple=True,
    default=[],
    help="Revoke grants of specific users or roles. Usage: --user bob.",
)
def revoke(spec, dry, user):
    """
    Revoke every grant in the specification file
    """
    spec_loader = load_specs(spec, user)
    run_commands(
        spec_loader.get_reconciler(),
        spec_loader.generate_revoke_queries(),
        dry,
        diff=False,
    )


@click.command(name="import")
@click.argument("import_id")
def import_grant(import_id):
    """
    Print the grant matching IMPORT_ID (user@host@database@table, ending
    with @ for grants with grant option) as a spec file entry.
    """
    reconciler = GrantReconciler(MySQLConnector())
    try:
        grant = reconciler.import_grant(import_id)
    except MyPermsError as exc:
        print_errors(exc)
        sys.exit(1)

    if grant is None:
        click.secho(f"No grant found for {import_id}", fg="yellow")
        return

    click.echo(yaml.safe_dump({"grants": [grant_to_fields(grant)]}, sort_keys=False))


@click.command()
@click.argument("spec")
@click.option(
    "--user",
    multiple=True,
    default=[],
    help="Only check grants of specific users or roles. Usage: --user bob.",
)
def spec_test(spec, user):
    """
    Load the grants spec file provided. CLI use only for confirming specifications are valid.
    """
    load_specs(spec, user)


def load_specs(spec, user):
    """
    Load specs separately.
    """
    try:
        click.secho("Confirming spec loads successfully")
        spec_loader = MySQLSpecLoader(spec, users=user)
        click.secho("Grants spec successfully loaded", fg="green")
    except SpecLoadingError as exc:
        print_errors(exc)
        sys.exit(1)

    return spec_loader


def apply_command(reconciler, command):
    """Run a command and record whether it succeeded in its run_status"""
    try:
        reconciler.run_statement(command["sql"])
        command["run_status"] = True
    except QueryError:
        command["run_status"] = False
    return command


def run_commands(reconciler, commands, dry, diff, print_skipped=False):
    """
    Apply the commands that are not granted yet, unless dry, and print them.
    Already granted commands are only printed with print_skipped.
    """
    for command in commands:
        if command["already_granted"]:
            if print_skipped:
                print_command(command, diff, dry=dry)
            continue

        if not dry:
            apply_command(reconciler, command)
        print_command(command, diff, dry=dry)


cli.add_command(spec_test)  # type: ignore
cli.add_command(import_grant)  # type: ignore
