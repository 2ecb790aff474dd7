"""
Unit tests for settings, the JSON publisher and the command line entry point.
"""
import json

import pytest

from catalog_snapshot.cmd import main as cli
from catalog_snapshot.config.settings import Settings, get_settings, parse_patterns
from catalog_snapshot.internal.domain.errors import ConfigError, PublishError
from catalog_snapshot.internal.domain.snapshot import CatalogSnapshot
from catalog_snapshot.internal.infrastructure.publisher import render_document, write_document
from catalog_snapshot.internal.transport.document.dto import CatalogDocument, MetaDTO
from catalog_snapshot.internal.usecase.build_catalog import BuildCatalogOutput


ENV_KEYS = (
    "BILLING_BASE_URL", "BILLING_API_KEY", "BILLING_TIMEOUT", "BILLING_STRICT_TLS",
    "PUBLIC_SITE_URL", "DATA_OUTPUT", "JSON_PRETTY", "GEN_SHOW_ERRORS",
    "EXCLUDE_PRODUCT_PATTERNS", "SITE_LOGO_URL", "SITE_FAVICON_URL", "METRICS_TEXTFILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolated environment without a .env file and with a fresh settings cache."""
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def document():
    """Minimal catalog document."""
    return CatalogDocument(
        meta=MetaDTO(generated_at="2024-05-01T12:00:00+00:00", generator="fossbilling-static-site-gen"),
        domain_registration_slug="dómain/registration",
    )


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self, clean_env):
        """Test default values."""
        settings = get_settings()

        assert settings.billing_timeout == 25
        assert settings.json_pretty is True
        assert settings.data_output == "./data.json"
        assert settings.get_exclude_patterns() == [
            "tld", "domain register", "domain registration", "domain transfer", "domain renewal",
        ]
        assert settings.get_custom_assets() == {}

    def test_environment_overrides(self, clean_env):
        """Test parsing of environment variables."""
        clean_env.setenv("BILLING_BASE_URL", "https://billing.test/")
        clean_env.setenv("BILLING_TIMEOUT", "40")
        clean_env.setenv("BILLING_STRICT_TLS", "0")
        clean_env.setenv("EXCLUDE_PRODUCT_PATTERNS", " Trial , ,Legacy ")
        clean_env.setenv("SITE_LOGO_URL", " https://cdn.test/logo.svg ")

        settings = get_settings()

        assert settings.billing_timeout == 40
        assert settings.billing_strict_tls is False
        assert settings.get_exclude_patterns() == ["trial", "legacy"]
        assert settings.get_custom_assets() == {"logo_url": "https://cdn.test/logo.svg"}
        assert settings.get_public_site_url() == "https://billing.test"

    def test_settings_are_cached(self, clean_env):
        """Test that get_settings returns one instance."""
        assert get_settings() is get_settings()

    def test_missing_api_key(self, clean_env):
        """Test that the secret is required."""
        with pytest.raises(ConfigError) as exc_info:
            Settings(billing_api_key="  ").require_api_key()

        assert "BILLING_API_KEY is required" in exc_info.value.message
        assert Settings(billing_api_key="s3cr3t").require_api_key() == "s3cr3t"

    def test_parse_patterns(self):
        """Test CSV splitting."""
        assert parse_patterns("A,,b ,") == ["a", "b"]
        assert parse_patterns("") == []


class TestPublisher:
    """Tests for the JSON writer."""

    def test_pretty_and_compact_rendering(self, document):
        """Test indentation, unescaped text and trailing newline."""
        pretty = render_document(document, pretty=True)
        compact = render_document(document, pretty=False)

        assert pretty.endswith("}\n")
        assert '\n    "meta": {' in pretty
        assert compact.startswith('{"meta":{"generated_at"')
        assert '"domain_registration_slug":"dómain/registration"' in compact
        assert json.loads(pretty) == json.loads(compact)

    def test_write_creates_parent_directories(self, document, tmp_path):
        """Test that the document lands at the requested path."""
        target = tmp_path / "public" / "data" / "catalog.json"

        path = write_document(document, target, pretty=False)

        assert path == target
        assert json.loads(target.read_text(encoding="utf-8"))["meta"]["generator"] == "fossbilling-static-site-gen"

    def test_unwritable_path_raises_publish_error(self, document, tmp_path):
        """Test that filesystem failures are reported as PublishError."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(PublishError) as exc_info:
            write_document(document, blocker / "data.json")

        assert exc_info.value.path == str(blocker / "data.json")
        assert exc_info.value.message.startswith("Failed to write output file")


class TestCommandLine:
    """Tests for the command line entry point."""

    def test_flags_override_settings(self):
        """Test flag overlay, including valued boolean flags."""
        args = cli.build_parser().parse_args([
            "--out", "out/catalog.json",
            "--pretty=0",
            "--show-errors",
            "--timeout", "60",
            "--exclude-patterns", "trial",
        ])

        settings = cli.apply_overrides(Settings(), args)

        assert settings.data_output == "out/catalog.json"
        assert settings.json_pretty is False
        assert settings.gen_show_errors is True
        assert settings.billing_timeout == 60
        assert settings.get_exclude_patterns() == ["trial"]

    def test_empty_exclude_patterns_keep_configured_ones(self):
        """Test that an empty pattern list is ignored."""
        args = cli.build_parser().parse_args(["--exclude-patterns", " , "])

        settings = cli.apply_overrides(Settings(exclude_product_patterns="legacy"), args)

        assert settings.get_exclude_patterns() == ["legacy"]

    def test_missing_api_key_exits_with_error(self, clean_env, tmp_path, capsys):
        """Test that the run fails before any network call."""
        exit_code = cli.main(["--out", str(tmp_path / "data.json")])

        assert exit_code == 1
        assert "BILLING_API_KEY is required" in capsys.readouterr().err
        assert not (tmp_path / "data.json").exists()

    def test_successful_run_writes_document(self, clean_env, tmp_path, capsys, document):
        """Test the happy path with warnings shown and metrics exported."""
        clean_env.setenv("BILLING_API_KEY", "s3cr3t")
        clean_env.setenv("METRICS_TEXTFILE", str(tmp_path / "catalog.prom"))

        async def fake_run(settings, api_key, context):
            assert api_key == "s3cr3t"
            context.add_warning("products", "boom")
            return BuildCatalogOutput(document, CatalogSnapshot(), list(context.warnings))

        clean_env.setattr(cli, "run", fake_run)

        exit_code = cli.main(["--out", str(tmp_path / "data.json"), "--show-errors=1"])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert f"Generated {tmp_path / 'data.json'}" in captured.out
        assert "warnings:\n - products: boom" in captured.err
        assert json.loads((tmp_path / "data.json").read_text(encoding="utf-8"))["domain_registration_slug"] == (
            "dómain/registration"
        )
        assert (tmp_path / "catalog.prom").exists()
