"""Тесты для CLI (`sitemap_warmer.cli`) с использованием click.testing.CliRunner.
Проверяют команды `warm`, `resolve`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import importlib
import json
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

cli_module = importlib.import_module("sitemap_warmer.cli")
from sitemap_warmer.aggregator import WarmupReport
from sitemap_warmer.cli import cli
from sitemap_warmer.errors import FatalResolutionError
from sitemap_warmer.logger import init_logging

SITEMAP = "https://example.com/sitemap.xml"
SHIPPED_DEFAULT = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Без configs/default.yaml: конфиг строится из опций."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_logging():
    """CliRunner подменяет stdout; после теста возвращаем обычный handler."""
    yield
    init_logging(level="INFO")


@pytest.fixture()
def captured(monkeypatch):
    """Патчим run_warmup: возвращает отчёт без сети и запоминает конфиг."""
    calls = {}
    report = WarmupReport(sitemap_url=SITEMAP, discovered=3, resolved=3, fetched=3)

    async def fake_run(cfg):
        calls["config"] = cfg
        return report

    monkeypatch.setattr(cli_module, "run_warmup", fake_run)
    calls["report"] = report
    return calls


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SitemapWarmer" in result.output


def test_show_config_from_options():
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "--sitemap-url", SITEMAP])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["sitemap_url"] == SITEMAP
    assert data["concurrency"] == 100


def test_show_config_from_file(tmp_path):
    cfg_file = tmp_path / "warmer.json"
    cfg_file.write_text(json.dumps({"sitemap_url": SITEMAP, "concurrency": 20}), encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    assert json.loads(result.output)["concurrency"] == 20


def test_missing_sitemap_url_is_error():
    runner = CliRunner()
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 1
    assert "конфигурац" in result.output


def test_invalid_config_file(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text(f"sitemap_url: {SITEMAP}\nconcurrency: 0\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "warm"])
    assert result.exit_code == 1


def test_warm_passes_overrides(captured):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["warm", "-u", SITEMAP, "--concurrency", "7", "--limit", "5", "--no-retry", "--notify"],
    )
    assert result.exit_code == 0, result.output
    cfg = captured["config"]
    assert cfg.concurrency == 7
    assert cfg.limit == 5
    assert cfg.retry is False
    assert cfg.notify is True
    assert "3/3 fetched" in result.output


def test_warm_json_report(captured, tmp_path):
    out = tmp_path / "reports" / "warmup.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP, "--json", str(out)])
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["fetched"] == 3
    assert data["sitemap_url"] == SITEMAP


def test_failures_do_not_change_exit_code_by_default(captured):
    captured["report"].remaining_failures = [{"url": "https://example.com/x", "status": 500}]
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP])
    assert result.exit_code == 0


def test_fail_on_errors(captured):
    captured["report"].remaining_failures = [{"url": "https://example.com/x", "status": 500}]
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP, "--fail-on-errors"])
    assert result.exit_code == 2


def test_fatal_resolution_error(monkeypatch):
    async def fatal(cfg):
        raise FatalResolutionError(SITEMAP, "HTTP 500")

    monkeypatch.setattr(cli_module, "run_warmup", fatal)
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP])
    assert result.exit_code == 1
    assert "HTTP 500" in result.output


def test_run_timeout(monkeypatch):
    async def slow(cfg):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli_module, "run_warmup", slow)
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP, "--run-timeout", "0.2"])
    assert result.exit_code == 1
    assert "не завершён" in result.output


def test_resolve_prints_urls(monkeypatch):
    async def fake_resolve(cfg):
        assert cfg.limit == 2
        return ["https://example.com/a", "https://example.com/b"]

    monkeypatch.setattr(cli_module, "resolve_urls", fake_resolve)
    runner = CliRunner()
    result = runner.invoke(cli, ["resolve", "-u", SITEMAP, "--limit", "2"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["https://example.com/a", "https://example.com/b"]


@pytest.fixture()
def shipped_default(tmp_path):
    """Рабочий каталог с configs/default.yaml из репозитория."""
    (tmp_path / "configs").mkdir()
    shutil.copy(SHIPPED_DEFAULT, tmp_path / "configs" / "default.yaml")


def test_shipped_default_requires_sitemap_url(shipped_default, monkeypatch):
    async def must_not_run(cfg):
        raise AssertionError("warmup started without a sitemap URL")

    monkeypatch.setattr(cli_module, "run_warmup", must_not_run)
    runner = CliRunner()
    result = runner.invoke(cli, ["warm"])
    assert result.exit_code == 1
    assert "sitemap_url" in result.output


def test_shipped_default_with_sitemap_option(shipped_default):
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "-u", SITEMAP])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["sitemap_url"] == SITEMAP
    assert data["sitemap_concurrency"] == 10


def test_zero_run_timeout_is_rejected(captured):
    runner = CliRunner()
    result = runner.invoke(cli, ["warm", "-u", SITEMAP, "--run-timeout", "0"])
    assert result.exit_code == 2
    assert "--run-timeout" in result.output
    assert "config" not in captured
