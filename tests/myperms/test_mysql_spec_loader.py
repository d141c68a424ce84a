import pytest

from myperms import CapabilityError, SpecLoadingError
from myperms.grants import GrantKind, RoleGrant, TablePrivilegeGrant
from myperms.identity import LoginIdentity, RoleIdentity
from myperms.mysql_spec_loader import MySQLSpecLoader
from myperms_test_utils.grant_spec_builder import GrantSpecBuilder
from myperms_test_utils.mysql_connector import MockMySQLConnector


@pytest.fixture
def test_grants_spec_file():
    """Spec file with a user grant, a role grant and a membership."""
    spec_file_data = (
        GrantSpecBuilder()
        .set_version()
        .add_user_grant(table="users", privileges=["SELECT", "UPDATE"])
        .add_role_grant(privileges=["select"])
        .add_membership(roles=["editor", "viewer"])
        .build()
    )
    yield spec_file_data


class TestMySQLSpecLoader:
    def test_grants(self, spec_file, test_grants_spec_file, mock_connector):
        spec_loader = MySQLSpecLoader(
            spec_file(test_grants_spec_file), conn=mock_connector
        )

        assert spec_loader.grants == [
            TablePrivilegeGrant(
                "app",
                "users",
                ["SELECT", "UPDATE"],
                False,
                LoginIdentity("bob", "%"),
                "NONE",
            ),
            TablePrivilegeGrant(
                "app", "*", ["SELECT"], False, RoleIdentity("reporting"), "NONE"
            ),
            RoleGrant(["editor", "viewer"], False, LoginIdentity("bob", "%"), "NONE"),
        ]

    @pytest.mark.parametrize(
        "users,kinds",
        [
            (["bob"], [GrantKind.TABLE, GrantKind.ROLE]),
            (["reporting"], [GrantKind.TABLE]),
            (["alice"], []),
            ([], [GrantKind.TABLE, GrantKind.TABLE, GrantKind.ROLE]),
        ],
    )
    def test_user_filter(
        self, spec_file, test_grants_spec_file, mock_connector, users, kinds
    ):
        spec_loader = MySQLSpecLoader(
            spec_file(test_grants_spec_file), conn=mock_connector, users=users
        )
        assert [grant.kind for grant in spec_loader.grants] == kinds

    def test_invalid_spec(self, spec_file, mock_connector):
        spec_path = spec_file(GrantSpecBuilder().add_raw(database="app").build())
        with pytest.raises(SpecLoadingError):
            MySQLSpecLoader(spec_path, conn=mock_connector)

    def test_generate_permission_queries(self, spec_file, test_grants_spec_file):
        conn = MockMySQLConnector(
            grants={
                "'bob'@'%'": [
                    "GRANT USAGE ON *.* TO `bob`@`%`",
                    "GRANT SELECT, INSERT ON `app`.`users` TO `bob`@`%`",
                    "GRANT `editor`@`%`,`viewer`@`%` TO `bob`@`%`",
                ],
            }
        )
        spec_loader = MySQLSpecLoader(spec_file(test_grants_spec_file), conn=conn)

        assert spec_loader.generate_permission_queries() == [
            {
                "already_granted": False,
                "sql": "REVOKE INSERT ON `app`.`users` FROM 'bob'@'%'",
            },
            {
                "already_granted": False,
                "sql": "GRANT SELECT, UPDATE ON `app`.`users` TO 'bob'@'%'",
            },
            {
                "already_granted": False,
                "sql": "GRANT SELECT ON `app`.* TO 'reporting'",
            },
            {
                "already_granted": True,
                "sql": "GRANT editor, viewer TO 'bob'@'%'",
            },
        ]
        assert conn.executed == []

    def test_role_grants_need_mysql_8(self, spec_file, test_grants_spec_file):
        conn = MockMySQLConnector(version="5.7.40-log")
        spec_loader = MySQLSpecLoader(spec_file(test_grants_spec_file), conn=conn)

        with pytest.raises(CapabilityError):
            spec_loader.generate_permission_queries()

    def test_no_role_grants_skip_version_check(
        self, mocker, spec_file, test_grants_spec_file
    ):
        conn = MockMySQLConnector(version="5.7.40-log")
        mocker.patch.object(conn, "get_version")
        spec_loader = MySQLSpecLoader(
            spec_file(test_grants_spec_file), conn=conn, users=["reporting"]
        )

        spec_loader.generate_permission_queries()
        conn.get_version.assert_not_called()

    def test_generate_revoke_queries(self, spec_file, test_grants_spec_file):
        spec_loader = MySQLSpecLoader(
            spec_file(test_grants_spec_file), conn=MockMySQLConnector()
        )
        assert [query["sql"] for query in spec_loader.generate_revoke_queries()] == [
            "REVOKE SELECT, UPDATE ON `app`.`users` FROM 'bob'@'%'",
            "REVOKE SELECT ON `app`.* FROM 'reporting'",
            "REVOKE editor, viewer FROM 'bob'@'%'",
        ]

    def test_connector_is_created_lazily(
        self, mocker, spec_file, test_grants_spec_file
    ):
        mock_connector_class = mocker.patch(
            "myperms.mysql_spec_loader.MySQLConnector",
            return_value=MockMySQLConnector(),
        )
        spec_loader = MySQLSpecLoader(spec_file(test_grants_spec_file))
        mock_connector_class.assert_not_called()

        spec_loader.get_reconciler()
        mock_connector_class.assert_called_once_with()
