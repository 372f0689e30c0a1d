"""Unit tests for the uvicorn launcher."""

import pytest
from pytest_mock import MockerFixture, MockType

from autorest import server
from autorest.core.config import Settings


@pytest.fixture
def mock_server_dependencies(mocker: MockerFixture, settings: Settings) -> dict[str, MockType]:
    settings.api_port = 3000
    mocks = {
        "get_settings": mocker.patch("autorest.server.get_settings", return_value=settings),
        "setup_logging": mocker.patch("autorest.server.setup_logging"),
        "logger": mocker.patch("autorest.server.logger"),
        "uvicorn_run": mocker.patch("autorest.server.uvicorn.run"),
    }
    return mocks


@pytest.mark.unit
class TestMain:
    def test_sets_up_logging(
        self, mock_server_dependencies: dict[str, MockType], settings: Settings
    ) -> None:
        server.main()

        mock_server_dependencies["setup_logging"].assert_called_once_with(settings)

    @pytest.mark.parametrize(("env_port", "expected_port"), [("9090", 9090), (None, 3000)])
    def test_port_precedence(
        self,
        mock_server_dependencies: dict[str, MockType],
        monkeypatch: pytest.MonkeyPatch,
        env_port: str | None,
        expected_port: int,
    ) -> None:
        if env_port is not None:
            monkeypatch.setenv("PORT", env_port)

        server.main()

        assert mock_server_dependencies["uvicorn_run"].call_args.kwargs["port"] == expected_port

    @pytest.mark.parametrize("debug", [True, False])
    def test_reload_follows_debug(
        self,
        mock_server_dependencies: dict[str, MockType],
        settings: Settings,
        debug: bool,
    ) -> None:
        settings.debug = debug

        server.main()

        args = mock_server_dependencies["uvicorn_run"].call_args
        assert args.args == ("autorest.api.main:app",)
        assert args.kwargs["reload"] is debug

    def test_uvicorn_logs_intercepted(
        self, mock_server_dependencies: dict[str, MockType]
    ) -> None:
        server.main()

        log_config = mock_server_dependencies["uvicorn_run"].call_args.kwargs["log_config"]
        assert log_config["handlers"]["default"]["class"] == (
            "autorest.core.logging.InterceptHandler"
        )
        assert set(log_config["loggers"]) == {"uvicorn", "uvicorn.error", "uvicorn.access"}
