from .cli import cli
from . import permissions  # noqa: F401  registers the commands


def main():
    cli(obj={})
