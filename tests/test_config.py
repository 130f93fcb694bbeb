"""config モジュールのテスト."""

import importlib

import sales_dashboard.config as config


class TestPaths:
    """PROJECT_ROOT / LOG_DIR の解決のテスト."""

    def test_home_override(self, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("MONTHLY_GOAL=123456\n", encoding="utf-8")
        monkeypatch.setenv("SALES_DASHBOARD_HOME", str(tmp_path))
        monkeypatch.delenv("LOG_DIR", raising=False)
        monkeypatch.setenv("MONTHLY_GOAL", "0")
        monkeypatch.delenv("MONTHLY_GOAL")
        try:
            importlib.reload(config)

            assert config.PROJECT_ROOT == tmp_path.resolve()
            assert config.LOG_DIR == tmp_path.resolve() / "logs"
            assert config.LOG_DIR.is_dir()
            assert config.MONTHLY_GOAL == 123456
        finally:
            monkeypatch.undo()
            importlib.reload(config)

    def test_defaults_to_cwd(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SALES_DASHBOARD_HOME", raising=False)
        monkeypatch.delenv("LOG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        try:
            importlib.reload(config)

            assert config.PROJECT_ROOT == tmp_path.resolve()
            assert (tmp_path / "logs").is_dir()
        finally:
            monkeypatch.undo()
            importlib.reload(config)
