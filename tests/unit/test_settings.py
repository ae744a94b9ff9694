"""
Tests for settings, facade wiring and the command line.

Settings are built with _env_file=None so a developer's .env cannot leak
into the results.
"""

import pytest
from pydantic import ValidationError

from s3support.cli import build_parser, main, run_command
from s3support.config.settings import Settings, get_settings
from s3support.core.models import Region
from s3support.dependencies import (
    create_credentials_provider,
    create_facade_client_factory,
    create_storage_facade,
)
from s3support.infrastructure.credentials import (
    EnvironmentCredentialsProvider,
    PropertiesFileCredentialsProvider,
    SessionCredentialsProvider,
    StaticCredentialsProvider,
)
from s3support.infrastructure.storage import (
    Boto3ClientFactory,
    CachingClientFactory,
    InMemoryClientFactory,
    InMemoryObjectStore,
)


S3_VARIABLES = (
    "S3_BUCKET_NAME",
    "S3_REGION",
    "S3_ENDPOINT_URL",
    "S3_ADDRESSING_STYLE",
    "S3_CREDENTIALS_SOURCE",
    "S3_ACCESS_KEY_ID",
    "S3_SECRET_ACCESS_KEY",
    "S3_CREDENTIALS_FILE",
    "S3_PROFILE_NAME",
    "S3_MOCK_MODE",
    "S3_REUSE_CLIENTS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in S3_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


# ---------------------------------------------------------------------------
# Settings Tests
# ---------------------------------------------------------------------------

class TestSettings:
    """Tests for loading settings."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.s3_bucket_name is None
        assert settings.region is Region.AP_NORTHEAST_1
        assert settings.s3_credentials_source == "settings"
        assert settings.s3_mock_mode is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("S3_BUCKET_NAME", "env-bucket")
        monkeypatch.setenv("S3_REGION", "EU-WEST-1")
        monkeypatch.setenv("S3_MOCK_MODE", "true")

        settings = make_settings()

        assert settings.s3_bucket_name == "env-bucket"
        assert settings.s3_region == "eu-west-1"
        assert settings.region is Region.EU_WEST_1
        assert settings.s3_mock_mode is True

    def test_unknown_region_fails_validation(self):
        with pytest.raises(ValidationError, match="Unknown region"):
            make_settings(s3_region="atlantis-1")

    def test_unknown_credentials_source_fails_validation(self):
        with pytest.raises(ValidationError):
            make_settings(s3_credentials_source="vault")

    def test_required_fields_for_settings_source(self):
        missing = make_settings().validate_required_fields()
        assert missing == ["S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"]

    def test_nothing_required_in_mock_mode(self):
        assert make_settings(s3_mock_mode=True).validate_required_fields() == []

    def test_nothing_required_for_other_sources(self):
        settings = make_settings(s3_credentials_source="environment")
        assert settings.validate_required_fields() == []

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


# ---------------------------------------------------------------------------
# Wiring Tests
# ---------------------------------------------------------------------------

class TestDependencies:
    """Tests for building providers, factories and facades from settings."""

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("environment", EnvironmentCredentialsProvider),
            ("properties", PropertiesFileCredentialsProvider),
            ("session", SessionCredentialsProvider),
            ("settings", StaticCredentialsProvider),
        ],
    )
    def test_provider_follows_source(self, source, expected):
        provider = create_credentials_provider(make_settings(s3_credentials_source=source))
        assert isinstance(provider, expected)

    def test_properties_provider_uses_configured_path(self):
        settings = make_settings(
            s3_credentials_source="properties",
            s3_credentials_file="/etc/app/creds.properties",
        )
        provider = create_credentials_provider(settings)
        assert str(provider.path) == "/etc/app/creds.properties"

    def test_settings_provider_uses_configured_keys(self):
        settings = make_settings(s3_access_key_id="AKIA", s3_secret_access_key="secret")
        creds = create_credentials_provider(settings).get_credentials()

        assert creds.access_key_id == "AKIA"
        assert creds.secret_access_key == "secret"

    def test_mock_mode_without_keys_gets_placeholder_credentials(self):
        provider = create_credentials_provider(make_settings(s3_mock_mode=True))
        assert provider.get_credentials().is_well_formed

    def test_client_factory_choice(self):
        assert isinstance(create_facade_client_factory(make_settings()), Boto3ClientFactory)
        assert isinstance(
            create_facade_client_factory(make_settings(s3_mock_mode=True)),
            InMemoryClientFactory,
        )
        assert isinstance(
            create_facade_client_factory(make_settings(s3_reuse_clients=True)),
            CachingClientFactory,
        )

    def test_create_storage_facade_from_settings(self):
        settings = make_settings(
            s3_bucket_name="reports",
            s3_region="us-west-2",
            s3_access_key_id="AKIA",
            s3_secret_access_key="secret",
        )

        facade = create_storage_facade(settings)

        assert facade.bucket_name == "reports"
        assert facade.region is Region.US_WEST_2
        assert facade.is_enabled() is True

    def test_create_storage_facade_without_keys_is_disabled(self):
        facade = create_storage_facade(make_settings())
        assert facade.is_enabled() is False

    def test_mock_facade_can_upload_to_configured_bucket(self):
        """Without a shared store, mock mode starts with the configured bucket in place."""
        facade = create_storage_facade(make_settings(s3_bucket_name="reports"), mock_mode=True)

        assert facade.upload_object("hello.txt", b"hello") is True
        assert facade.list_bucket_names() == {"reports"}

    def test_shared_store_is_left_untouched(self):
        store = InMemoryObjectStore()
        create_storage_facade(make_settings(s3_bucket_name="reports"), mock_mode=True, store=store)

        assert store.buckets == {}

    def test_create_storage_facade_mock_round_trip(self):
        store = InMemoryObjectStore()
        facade = create_storage_facade(make_settings(), mock_mode=True, store=store)

        facade.create_bucket("scratch")
        facade.upload_object("hello.txt", b"hello")

        assert store.get_object("scratch", "hello.txt") == b"hello"


# ---------------------------------------------------------------------------
# CLI Tests
# ---------------------------------------------------------------------------

class TestCli:
    """Tests for the command line."""

    @pytest.fixture
    def facade(self):
        return create_storage_facade(make_settings(), mock_mode=True, store=InMemoryObjectStore())

    def run(self, facade, *argv):
        return run_command(facade, build_parser().parse_args(list(argv)))

    def test_status_enabled(self, facade, capsys):
        facade.set_bucket_name("reports")

        assert self.run(facade, "status") == 0

        out = capsys.readouterr().out
        assert "bucket:  reports" in out
        assert "region:  ap-northeast-1" in out
        assert "enabled: yes" in out

    def test_status_disabled(self, facade, capsys):
        facade.set_credentials_provider(None)

        assert self.run(facade, "status") == 1
        assert "enabled: no" in capsys.readouterr().out

    def test_create_upload_and_list(self, facade, tmp_path, capsys):
        path = tmp_path / "note.txt"
        path.write_bytes(b"note")

        assert self.run(facade, "create-bucket", "notes") == 0
        assert self.run(facade, "upload", "note.txt", str(path), "--content-type", "text/plain") == 0
        assert self.run(facade, "list-buckets") == 0

        out = capsys.readouterr().out
        assert "Created bucket notes" in out
        assert "Uploaded note.txt to notes" in out
        assert out.strip().endswith("notes")

    def test_main_mock_create_bucket(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--mock", "--region", "eu-west-1", "create-bucket", "demo"])

        assert exc_info.value.code == 0
        assert "Created bucket demo" in capsys.readouterr().out

    def test_main_mock_upload_to_configured_bucket(self, capsys, tmp_path):
        """A single mock run can upload: the configured bucket exists in the fresh store."""
        path = tmp_path / "report.csv"
        path.write_bytes(b"id,value\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["--mock", "--bucket", "b", "upload", "k", str(path)])

        assert exc_info.value.code == 0
        assert "Uploaded k to b" in capsys.readouterr().out

    def test_main_mock_upload_with_bucket_from_environment(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setenv("S3_MOCK_MODE", "true")
        monkeypatch.setenv("S3_BUCKET_NAME", "env-bucket")
        path = tmp_path / "f"
        path.write_bytes(b"x")

        with pytest.raises(SystemExit) as exc_info:
            main(["upload", "k", str(path)])

        assert exc_info.value.code == 0
        assert "Uploaded k to env-bucket" in capsys.readouterr().out

    def test_main_reports_malformed_endpoint(self, monkeypatch, capsys):
        """boto3 rejects the endpoint while building the client; the CLI reports it cleanly."""
        monkeypatch.setenv("S3_ACCESS_KEY_ID", "AKIA")
        monkeypatch.setenv("S3_SECRET_ACCESS_KEY", "secret")
        monkeypatch.setenv("S3_ENDPOINT_URL", "not a url")

        with pytest.raises(SystemExit) as exc_info:
            main(["list-buckets"])

        assert exc_info.value.code == 1
        assert "Client initialization failed" in capsys.readouterr().err

    def test_main_reports_configuration_errors(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--mock", "upload", "k", str(tmp_path / "f")])

        assert exc_info.value.code == 1
        assert "Bucket name must be set" in capsys.readouterr().err

    def test_main_reports_delegate_errors(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--mock", "--bucket", "missing", "upload", "k", str(tmp_path / "absent")])

        assert exc_info.value.code == 1
        assert "ERROR:" in capsys.readouterr().err
