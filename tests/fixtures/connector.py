import pytest

from myperms_test_utils.mysql_connector import MockMySQLConnector


@pytest.fixture
def mock_connector():
    return MockMySQLConnector()


@pytest.fixture
def bob_connector():
    """A server where 'bob'@'%' holds a few grants on the app database."""
    return MockMySQLConnector(
        grants={
            "'bob'@'%'": [
                "GRANT USAGE ON *.* TO `bob`@`%`",
                "GRANT SELECT, INSERT ON `app`.`users` TO `bob`@`%`",
                "GRANT INSERT ON `app`.`orders` TO `bob`@`%`",
                "GRANT ALL PRIVILEGES ON `app`.`users` TO `bob`@`%` WITH GRANT OPTION",
            ],
            "'reporting'": [
                "GRANT EXECUTE ON PROCEDURE `app`.`refresh` TO 'reporting'",
            ],
        }
    )
