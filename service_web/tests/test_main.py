"""
Tests for process startup and the uvicorn runner.
"""

from unittest.mock import MagicMock, patch

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_web.app import main as web_main
from service_web.app.assets import StaticAssetServer
from service_web.app.main import WebService


class TestRun:
    """Test cases for BaseService.run."""

    @patch("shared.base_service.uvicorn.run")
    def test_run_applies_server_limits(self, mock_run, make_config, asset_tree):
        service = WebService(make_config(port=9090), static_server=StaticAssetServer(asset_tree))

        service.run()

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] is service.app
        assert kwargs["port"] == 9090
        assert kwargs["timeout_keep_alive"] == 60
        assert kwargs["timeout_graceful_shutdown"] == 10
        assert kwargs["access_log"] is False

    @patch("shared.base_service.uvicorn.run")
    def test_run_honours_configured_timeouts(self, mock_run, make_config, asset_tree):
        config = make_config(idle_timeout=30, shutdown_timeout=5)
        service = WebService(config, static_server=StaticAssetServer(asset_tree))

        service.run()

        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout_keep_alive"] == 30
        assert kwargs["timeout_graceful_shutdown"] == 5


class TestMain:
    """Test cases for the process entry point."""

    @patch("shared.base_service.uvicorn.run")
    def test_missing_bundle_exits_with_status_1(self, mock_run, make_config, tmp_path):
        config = make_config(static_dir=str(tmp_path / "missing"))
        logger = MagicMock()

        with patch.object(web_main, "get_config", return_value=config), \
                patch.object(web_main, "get_logger", return_value=logger):
            with pytest.raises(SystemExit) as exc_info:
                web_main.main()

        assert exc_info.value.code == 1
        logger.critical.assert_called_once()
        assert logger.critical.call_args.kwargs["root"] == str(tmp_path / "missing")
        mock_run.assert_not_called()

    @patch("shared.base_service.uvicorn.run")
    def test_development_mode_starts_without_bundle(self, mock_run, make_config, tmp_path):
        config = make_config(mode="dev", static_dir=str(tmp_path / "missing"))

        with patch.object(web_main, "get_config", return_value=config):
            web_main.main()

        mock_run.assert_called_once()

    @patch("shared.base_service.uvicorn.run")
    def test_bundled_mode_starts(self, mock_run, make_config, bundle_dir):
        config = make_config(static_dir=str(bundle_dir))

        with patch.object(web_main, "get_config", return_value=config):
            web_main.main()

        mock_run.assert_called_once()
