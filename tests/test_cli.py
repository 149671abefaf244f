"""Tests for the nixpin CLI: argument parsing, config and output."""
import csv
import json
import logging
from unittest.mock import patch

import pytest

from args import parse_args
from cli_config import apply_cli_overrides, apply_config, load_config
from constants import Constants, ExitCodes
from models import PackageResolution
import nixpin

RESOLVED = PackageResolution(
    name="demo",
    version="1.2.3",
    hash_expr='"sha256-3q2+7w=="',
    build_deps=("hatchling", "hatch-vcs"),
    runtime_deps=("httpx",),
    resolved=True,
)


class TestArgParsing:
    """Tests for CLI argument parsing."""

    def test_single_packages(self):
        ns = parse_args(["-p", "flask", "-p", "httpx"])
        assert ns.SINGLE == ["flask", "httpx"]
        assert ns.LOG_LEVEL is None
        assert ns.BUILD_STRATEGY is None

    def test_inputs_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["-p", "flask", "-l", "list.txt"])

    def test_input_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_tunables(self):
        ns = parse_args([
            "-p", "flask", "-j", "8", "--timeout", "10",
            "--build-strategy", "BACKEND", "--registry-url", "https://mirror/pypi",
        ])
        assert ns.JOBS == 8
        assert ns.TIMEOUT == 10
        assert ns.BUILD_STRATEGY == "backend"
        assert ns.REGISTRY_URL == "https://mirror/pypi"


class TestConfig:
    """YAML config and CLI override precedence."""

    def test_load_and_apply(self, tmp_path, restore_constants):
        path = tmp_path / "nixpin.yml"
        path.write_text(
            "nixpin:\n"
            "  registry_url: https://mirror.example/pypi\n"
            "  request_timeout: 12\n"
            "  max_concurrency: 2\n"
            "  build_strategy: backend\n",
            encoding="utf-8",
        )

        apply_config(load_config(str(path)))

        assert Constants.REGISTRY_URL_PYPI == "https://mirror.example/pypi/"
        assert Constants.REQUEST_TIMEOUT == 12
        assert Constants.MAX_CONCURRENCY == 2
        assert Constants.BUILD_STRATEGY == "backend"

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = tmp_path / "cfg.yaml"
        path.write_text("request_timeout: 7\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_CONFIG, str(path))
        assert load_config() == {"request_timeout": 7}

    def test_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "absent.yml")) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("key: [unclosed\n", encoding="utf-8")
        assert load_config(str(path)) == {}

    def test_invalid_values_ignored(self, restore_constants):
        before = (Constants.REQUEST_TIMEOUT, Constants.BUILD_STRATEGY)
        apply_config({"request_timeout": "soon", "build_strategy": "magic"})
        assert (Constants.REQUEST_TIMEOUT, Constants.BUILD_STRATEGY) == before

    def test_cli_overrides_win(self, restore_constants):
        apply_config({"request_timeout": 12, "max_concurrency": 2})
        apply_cli_overrides(parse_args(["-p", "x", "--timeout", "3", "-j", "1"]))
        assert Constants.REQUEST_TIMEOUT == 3
        assert Constants.MAX_CONCURRENCY == 1


class TestBuildPkglist:
    """Package list inputs."""

    def test_list_file(self, tmp_path):
        path = tmp_path / "pkgs.txt"
        path.write_text("flask\n\n# comment\nhttpx\nflask\n", encoding="utf-8")
        assert nixpin.build_pkglist(parse_args(["-l", str(path)])) == ["flask", "httpx"]

    def test_requirements_file(self, tmp_path):
        path = tmp_path / "requirements.txt"
        path.write_text("requests>=2.31\n# pinned\nPyYAML==6.0.1\n", encoding="utf-8")
        assert nixpin.build_pkglist(parse_args(["-r", str(path)])) == ["requests", "PyYAML"]

    def test_missing_list_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            nixpin.load_pkgs_file(str(tmp_path / "absent.txt"))
        assert exc.value.code == ExitCodes.FILE_ERROR.value

    def test_single(self):
        assert nixpin.build_pkglist(parse_args(["-p", " flask ", "-p", "flask"])) == ["flask"]


@patch("nixpin.configure_logging")
class TestMain:
    """End-to-end CLI runs with resolution mocked out."""

    @patch("nixpin.resolve_many")
    def test_json_output(self, mock_resolve, _mock_logging, tmp_path, restore_constants):
        mock_resolve.return_value = [RESOLVED]
        out = tmp_path / "out.json"

        with pytest.raises(SystemExit) as exc:
            nixpin.main(["-p", "demo", "-o", str(out)])

        assert exc.value.code == ExitCodes.SUCCESS.value
        assert json.loads(out.read_text(encoding="utf-8")) == [RESOLVED.as_dict()]

    @patch("nixpin.resolve_many")
    def test_csv_output(self, mock_resolve, _mock_logging, tmp_path, restore_constants):
        mock_resolve.return_value = [RESOLVED]
        out = tmp_path / "out.csv"

        with pytest.raises(SystemExit):
            nixpin.main(["-p", "demo", "-o", str(out)])

        with open(out, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == ["name", "version", "hash_expr", "build_deps", "runtime_deps", "resolved"]
        assert rows[1] == ["demo", "1.2.3", '"sha256-3q2+7w=="', "hatchling hatch-vcs", "httpx", "True"]

    @patch("nixpin.resolve_many")
    def test_stdout_json(self, mock_resolve, _mock_logging, capsys, restore_constants):
        mock_resolve.return_value = [RESOLVED]

        with pytest.raises(SystemExit):
            nixpin.main(["-p", "demo"])

        assert json.loads(capsys.readouterr().out)[0]["version"] == "1.2.3"

    @patch("nixpin.resolve_many")
    def test_error_on_warnings(self, mock_resolve, _mock_logging, tmp_path, restore_constants):
        mock_resolve.return_value = [RESOLVED, PackageResolution.fallback("typo-pkg")]

        with pytest.raises(SystemExit) as exc:
            nixpin.main(["-p", "demo", "-p", "typo-pkg", "-q", "--error-on-warnings"])

        assert exc.value.code == ExitCodes.EXIT_WARNINGS.value

    @patch("nixpin.resolve_many")
    def test_jobs_flag_sets_concurrency(self, mock_resolve, _mock_logging, restore_constants):
        mock_resolve.return_value = [RESOLVED]

        with pytest.raises(SystemExit):
            nixpin.main(["-p", "demo", "-q", "-j", "6"])

        assert mock_resolve.call_args.kwargs == {"max_workers": 6}


class TestLogLevel:
    """Log level selection on the CLI path."""

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, root.handlers[:]
        yield root
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    @patch("nixpin.resolve_many")
    def test_env_var_applies_without_flag(self, mock_resolve, root_logger, monkeypatch, restore_constants):
        mock_resolve.return_value = [RESOLVED]
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "DEBUG")

        with pytest.raises(SystemExit):
            nixpin.main(["-p", "demo"])

        assert root_logger.level == logging.DEBUG

    @patch("nixpin.resolve_many")
    def test_flag_beats_env_var(self, mock_resolve, root_logger, monkeypatch, restore_constants):
        mock_resolve.return_value = [RESOLVED]
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "DEBUG")

        with pytest.raises(SystemExit):
            nixpin.main(["-p", "demo", "--loglevel", "WARNING"])

        assert root_logger.level == logging.WARNING


def test_exit_codes():
    assert {c.name: c.value for c in ExitCodes} == {
        "SUCCESS": 0,
        "FILE_ERROR": 1,
        "EXIT_WARNINGS": 3,
    }
