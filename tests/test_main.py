"""
Tests for the console entry point.
"""
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from rentbot import main as main_module
from rentbot.core.config import Settings
from rentbot.core.exceptions import DatabaseConnectionError


def invalid_settings():
    try:
        Settings(supabase_url="")
    except ValidationError as e:
        return e
    raise AssertionError("expected validation to fail")


class TestRun:
    def test_invalid_configuration_exits(self):
        with patch.object(main_module, "get_settings", side_effect=invalid_settings()), \
                patch.object(main_module.uvicorn, "run") as serve:
            with pytest.raises(SystemExit) as exc:
                main_module.run()

        assert exc.value.code == 1
        serve.assert_not_called()

    def test_unreachable_backend_exits(self):
        probe = AsyncMock(side_effect=DatabaseConnectionError("connection refused"))
        with patch.object(main_module, "check_backend", probe), \
                patch.object(main_module.uvicorn, "run") as serve:
            with pytest.raises(SystemExit) as exc:
                main_module.run()

        assert exc.value.code == 1
        serve.assert_not_called()

    def test_serves_app_factory(self, settings):
        with patch.object(main_module, "check_backend", AsyncMock()), \
                patch.object(main_module.uvicorn, "run") as serve:
            main_module.run()

        args, kwargs = serve.call_args
        assert args == ("rentbot.main:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == settings.port
