import pytest

from myperms import SpecLoadingError
from myperms.spec_file_loader import describe_grant, ensure_valid_schema, load_spec
from myperms_test_utils.grant_spec_builder import GrantSpecBuilder


class TestEnsureValidSchema:
    def test_valid_spec(self):
        spec = {
            "version": "1.0",
            "grants": [
                {
                    "user": "bob",
                    "host": "%",
                    "database": "app",
                    "privileges": ["SELECT"],
                },
                {
                    "role": "reporting",
                    "database": "PROCEDURE app.refresh",
                    "privileges": ["EXECUTE"],
                },
                {"user": "bob", "roles": ["editor"], "grant": True},
            ],
        }
        assert ensure_valid_schema(spec) == []

    def test_grants_are_required(self):
        assert ensure_valid_schema({"version": "1.0"}) == [
            "Spec error: grants: required field"
        ]

    @pytest.mark.parametrize(
        "config,field",
        [
            ({"database": "app"}, "user"),
            ({"user": "bob", "role": "reporting", "database": "app"}, "role"),
            ({"user": "bob"}, "database"),
            ({"user": "bob", "database": "app", "roles": ["editor"]}, "roles"),
            ({"user": "bob", "database": "app", "privileges": "SELECT"}, "privileges"),
            ({"user": "bob", "database": "app", "grant": "yes please"}, "grant"),
            ({"user": "bob", "database": "app", "schema": "public"}, "schema"),
            ({"role": "reporting", "host": "%", "database": "app"}, "host"),
            ({"user": "bob", "database": "app"}, "privileges"),
            ({"user": "bob", "database": "app", "privileges": []}, "privileges"),
        ],
    )
    def test_invalid_grant(self, config, field):
        error_messages = ensure_valid_schema({"grants": [config]})
        assert error_messages
        assert any(f'field "{field}"' in message for message in error_messages)
        assert all(
            message.startswith("Spec error: grant #1 ") for message in error_messages
        )

    def test_describe_grant(self):
        assert describe_grant({"user": "bob"}) == "bob@localhost"
        assert describe_grant({"user": "bob", "host": "%"}) == "bob@%"
        assert describe_grant({"role": "reporting"}) == "reporting"


class TestLoadSpec:
    def test_load_spec(self, spec_file):
        spec_path = spec_file(
            GrantSpecBuilder()
            .set_version()
            .add_user_grant(table="users", privileges=["SELECT", "INSERT"])
            .add_membership(roles=["editor"])
            .build()
        )

        spec = load_spec(spec_path)
        assert spec["version"] == "1.0"
        assert spec["grants"][0] == {
            "user": "bob",
            "host": "%",
            "database": "app",
            "table": "users",
            "privileges": ["SELECT", "INSERT"],
        }
        assert spec["grants"][1] == {"user": "bob", "host": "%", "roles": ["editor"]}

    def test_missing_file(self, mkdtemp):
        spec_path = str(mkdtemp() / "missing.yml")
        with pytest.raises(SpecLoadingError) as exc:
            load_spec(spec_path)
        assert str(exc.value) == f"Spec File {spec_path} not found"

    def test_empty_file(self, spec_file):
        with pytest.raises(SpecLoadingError):
            load_spec(spec_file(""))

    def test_all_errors_are_reported(self, spec_file):
        spec_path = spec_file(
            GrantSpecBuilder()
            .add_raw(user="bob", host="%")
            .add_raw(role="reporting", host="%", database="app")
            .build()
        )

        with pytest.raises(SpecLoadingError) as exc:
            load_spec(spec_path)
        error_message = str(exc.value)
        assert 'Spec error: grant #1 "bob@%", field "database"' in error_message
        assert 'Spec error: grant #2 "reporting", field "host"' in error_message
