"""
Unit tests for influxbench.config.
"""

import json

import pytest

from influxbench.config import BenchmarkSettings, load_settings, read_settings_file
from influxbench.errors import ConfigurationError

FULL_ENV = {
    "INFLUXBENCH_HOST": "http://influx:8086/",
    "INFLUXBENCH_TOKEN": "t0ken",
    "INFLUXBENCH_ORG": "acme",
    "INFLUXBENCH_BUCKET": "test-bucket",
}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run every test in an empty directory with no INFLUXBENCH_* variables set."""
    monkeypatch.chdir(tmp_path)
    for name in (*FULL_ENV, "INFLUXBENCH_ROUND_TIMEOUT", "INFLUXBENCH_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def full_env(monkeypatch):
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)


class TestLoadSettings:
    def test_from_environment(self, full_env):
        settings = load_settings()

        assert settings.host == "http://influx:8086"
        assert settings.token == "t0ken"
        assert settings.org == "acme"
        assert settings.bucket == "test-bucket"
        assert settings.round_timeout is None

    def test_from_default_settings_file(self, isolated_env):
        (isolated_env / "appsettings.json").write_text(json.dumps({
            "Host": "https://influx.example.com",
            "Token": "abc",
            "Org": "acme",
            "Bucket": "bench",
            "RoundTimeout": 30,
            "Logging": {"LogLevel": {"Default": "Information"}},
        }))

        settings = load_settings()

        assert settings.host == "https://influx.example.com"
        assert settings.bucket == "bench"
        assert settings.round_timeout == 30.0

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"Host": "http://file:8086", "Token": "a", "Org": "o", "Bucket": "b"}))
        monkeypatch.setenv("INFLUXBENCH_CONFIG", str(path))
        monkeypatch.setenv("INFLUXBENCH_BUCKET", "from-env")

        settings = load_settings()

        assert settings.host == "http://file:8086"
        assert settings.bucket == "from-env"

    def test_round_timeout_from_environment(self, full_env, monkeypatch):
        monkeypatch.setenv("INFLUXBENCH_ROUND_TIMEOUT", "2.5")
        assert load_settings().round_timeout == 2.5

    @pytest.mark.parametrize("missing", sorted(FULL_ENV))
    def test_missing_value_is_a_configuration_error(self, full_env, monkeypatch, missing):
        monkeypatch.delenv(missing)

        with pytest.raises(ConfigurationError):
            load_settings()

    def test_unprefixed_variables_are_ignored(self, full_env, monkeypatch):
        monkeypatch.delenv("INFLUXBENCH_ORG")
        monkeypatch.setenv("ORG", "acme")

        with pytest.raises(ConfigurationError, match="org"):
            load_settings()

    def test_blank_value_is_a_configuration_error(self, full_env, monkeypatch):
        monkeypatch.setenv("INFLUXBENCH_ORG", "   ")

        with pytest.raises(ConfigurationError, match="org"):
            load_settings()

    @pytest.mark.parametrize("host", ["influx:8086", "ftp://influx:8086", "http://", "https://:8086"])
    def test_host_must_be_an_http_url_with_a_host(self, full_env, monkeypatch, host):
        monkeypatch.setenv("INFLUXBENCH_HOST", host)

        with pytest.raises(ConfigurationError, match="host"):
            load_settings()

    @pytest.mark.parametrize("timeout", ["0", "-1", "soon"])
    def test_bad_round_timeout(self, full_env, monkeypatch, timeout):
        monkeypatch.setenv("INFLUXBENCH_ROUND_TIMEOUT", timeout)

        with pytest.raises(ConfigurationError):
            load_settings()

    def test_explicit_settings_file_must_exist(self, full_env, monkeypatch, tmp_path):
        monkeypatch.setenv("INFLUXBENCH_CONFIG", str(tmp_path / "nope.json"))

        with pytest.raises(ConfigurationError, match="not found"):
            load_settings()

    def test_malformed_settings_file(self, full_env, isolated_env):
        (isolated_env / "appsettings.json").write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_settings()


class TestReadSettingsFile:
    def test_keys_become_field_names(self, tmp_path):
        path = tmp_path / "appsettings.json"
        path.write_text(json.dumps({"Host": "http://h:8086", "RoundTimeout": 5}))

        assert read_settings_file(path) == {"host": "http://h:8086", "round_timeout": 5}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            read_settings_file(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            read_settings_file(path)


class TestBenchmarkSettings:
    def test_describe_hides_token(self, settings):
        assert "secret-token" not in settings.describe()
        assert "bucket=test-bucket" in settings.describe()

    def test_settings_are_frozen(self, settings):
        with pytest.raises(Exception):
            settings.bucket = "other"

    def test_keyword_arguments_win_over_environment(self, full_env):
        settings = BenchmarkSettings(host="http://h:8086", token="t", org="o", bucket="b")
        assert settings.org == "o"
