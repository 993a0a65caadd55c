"""
Tests for data/log directory resolution.
"""

from trendpath.utils import paths
from trendpath.utils.logging_config import setup_logging


class TestPaths:

    def test_home_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRENDPATH_HOME", str(tmp_path))

        assert paths.get_data_dir() == tmp_path.resolve() / "data"
        assert paths.get_logs_dir() == tmp_path.resolve() / "logs"
        assert paths.get_settings_path() == tmp_path.resolve() / "data" / "settings.json"
        assert (tmp_path / "data").is_dir()

    def test_read_only_base_falls_back_to_home(self, tmp_path, monkeypatch):
        monkeypatch.setattr(paths, "_try_writable", lambda path: False)
        monkeypatch.setattr(paths.Path, "home", classmethod(lambda cls: tmp_path))

        assert paths.get_data_dir() == tmp_path / ".trendpath" / "data"


class TestSetupLogging:

    def test_default_log_dir_and_idempotence(self, tmp_path, monkeypatch):
        import logging

        monkeypatch.setenv("TRENDPATH_HOME", str(tmp_path))
        logger = setup_logging(app_name="trendpath_paths_test")
        try:
            handler_count = len(logger.handlers)
            assert setup_logging(app_name="trendpath_paths_test") is logger
            assert len(logger.handlers) == handler_count == 2
            assert (tmp_path / "logs").is_dir()
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logging.getLogger("trendpath_paths_test").setLevel(logging.NOTSET)
