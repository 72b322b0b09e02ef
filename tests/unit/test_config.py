"""
Unit tests for configuration and the command-line interface.
"""

import pytest

from webserver.__main__ import build_parser, config_from_args, main
from webserver.config import ServerConfig
from webserver.server import WebServer


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.timeout == 30.0
        assert config.document_root == "."
        assert config.confine_to_root is True
        assert config.log_format == "text"

    def test_defaults_are_valid(self):
        ServerConfig().validate()

    def test_port_zero_is_allowed(self, document_root):
        ServerConfig(port=0, document_root=str(document_root)).validate()

    @pytest.mark.parametrize("kwargs, message", [
        ({"port": 70000}, "Invalid port"),
        ({"port": -1}, "Invalid port"),
        ({"buffer_size": 10}, "buffer_size"),
        ({"timeout": 0}, "timeout"),
        ({"max_header_size": 2048}, "max_header_size"),
        ({"document_root": "/definitely/not/here"}, "document_root"),
        ({"log_format": "xml"}, "log_format"),
    ])
    def test_validate_rejects(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            ServerConfig(**kwargs).validate()

    def test_no_timeout_is_allowed(self):
        ServerConfig(timeout=None).validate()

    def test_from_env(self, monkeypatch, document_root):
        monkeypatch.setenv("WEBSERVER_HOST", "0.0.0.0")
        monkeypatch.setenv("WEBSERVER_PORT", "3000")
        monkeypatch.setenv("WEBSERVER_TIMEOUT", "5")
        monkeypatch.setenv("WEBSERVER_ROOT", str(document_root))
        monkeypatch.setenv("WEBSERVER_NAME", "EnvServer/2.0")
        monkeypatch.setenv("WEBSERVER_TEMPLATE_SERVER", "Env Server")
        monkeypatch.setenv("WEBSERVER_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.timeout == 5.0
        assert config.document_root == str(document_root)
        assert config.server_name == "EnvServer/2.0"
        assert config.template_server == "Env Server"
        assert config.log_format == "json"

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "WEBSERVER_HOST",
            "WEBSERVER_PORT",
            "WEBSERVER_TIMEOUT",
            "WEBSERVER_ROOT",
            "WEBSERVER_NAME",
            "WEBSERVER_TEMPLATE_SERVER",
            "WEBSERVER_LOG_LEVEL",
            "WEBSERVER_LOG_FORMAT",
        ):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()


class TestCommandLine:
    """Tests for the argparse front end."""

    def test_arguments_override_environment(self, monkeypatch, document_root):
        monkeypatch.setenv("WEBSERVER_PORT", "3000")
        monkeypatch.setenv("WEBSERVER_HOST", "0.0.0.0")

        args = build_parser().parse_args([
            "--port", "9000",
            "--root", str(document_root),
            "--no-confine",
            "--log-level", "debug",
            "--template-server", "CLI Server",
        ])
        config = config_from_args(args)

        assert config.port == 9000
        assert config.host == "0.0.0.0"
        assert config.document_root == str(document_root)
        assert config.confine_to_root is False
        assert config.log_level == "DEBUG"
        assert config.template_server == "CLI Server"

    def test_confinement_on_unless_disabled(self, monkeypatch):
        monkeypatch.delenv("WEBSERVER_PORT", raising=False)
        config = config_from_args(build_parser().parse_args([]))
        assert config.confine_to_root is True

    def test_invalid_root_exits_with_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--root", "/definitely/not/here"])

        assert exc_info.value.code == 2
        assert "document_root" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "1.0.0" in capsys.readouterr().out


class TestRunOverrides:
    """Overrides passed to WebServer.run() are validated before binding."""

    @pytest.mark.parametrize("port", [70000, -1])
    def test_invalid_port_override_is_rejected(self, document_root, port):
        server = WebServer(ServerConfig(port=0, document_root=str(document_root)))

        with pytest.raises(ValueError, match="Invalid port"):
            server.run(port=port)

        assert not server.is_running
