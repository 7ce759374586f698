import sys

import pytest
from click.testing import CliRunner
from loguru import logger

from periodically import __version__
from periodically.cli.main import main


@pytest.fixture(autouse=True)
def restore_logging(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    # setup_logging会把sink绑定到CliRunner的临时stderr
    logger.remove()
    logger.add(sys.stderr)


def test_version():
    """测试版本号输出"""
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_demo_runs_and_stops():
    """测试演示命令正常运行并停止"""
    result = CliRunner().invoke(
        main,
        ["demo", "--every", "0.05", "--every", "0.1", "--duration", "0.3", "--stop-timeout", "2"],
    )
    assert result.exit_code == 0, result.output


def test_demo_rejects_invalid_interval():
    """测试非正数间隔时退出码为2"""
    result = CliRunner().invoke(main, ["demo", "--every", "0", "--duration", "0"])
    assert result.exit_code == 2
    assert "interval must be positive" in result.output


def test_demo_rejects_missing_config(tmp_path):
    """测试配置文件不存在时退出码为2"""
    result = CliRunner().invoke(
        main, ["demo", "--config", str(tmp_path / "absent.yaml"), "--duration", "0"]
    )
    assert result.exit_code == 2
    assert "配置文件不存在" in result.output
