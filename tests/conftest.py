import logging

import pytest
from colorama import Fore, Style, init

init()

logging.basicConfig(level=logging.INFO)

pytest_plugins = ["fixtures.fs", "fixtures.cli", "fixtures.connector"]


@pytest.fixture
def mysql_connector_env(monkeypatch):
    monkeypatch.setenv("PERMISSION_BOT_USER", "TEST")
    monkeypatch.setenv("PERMISSION_BOT_PASSWORD", "TEST")
    monkeypatch.setenv("PERMISSION_BOT_HOST", "TEST")
    monkeypatch.setenv("PERMISSION_BOT_DATABASE", "TEST")
    monkeypatch.delenv("PERMISSION_BOT_PORT", raising=False)
    monkeypatch.delenv("PERMISSION_BOT_SSL_CA", raising=False)


def pytest_itemcollected(item):
    """
    Show the docstrings of test classes and functions next to the test ids:
    https://stackoverflow.com/a/39035226
    """
    par = item.parent.obj
    node = item.obj
    pref = " ".join(par.__doc__.split()) + " " if par.__doc__ else ""
    suf = " ".join(node.__doc__.split()) + " " if node.__doc__ else ""
    if pref or suf:
        item._nodeid = (
            Fore.YELLOW + "".join((pref, suf)) + "\n" + Style.RESET_ALL + item._nodeid
        )
