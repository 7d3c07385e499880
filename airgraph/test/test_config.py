from airgraph.server.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.host == "0.0.0.0"
        assert settings.port == 3001
        assert settings.reload is False
        assert settings.log_level == "INFO"
        assert settings.cors_origins == ["*"]
        assert settings.seed_demo is False

    def test_values_from_environment(self):
        settings = Settings.from_env({
            "AIRGRAPH_HOST": "127.0.0.1",
            "AIRGRAPH_PORT": "8080",
            "AIRGRAPH_RELOAD": "yes",
            "AIRGRAPH_LOG_LEVEL": "debug",
            "AIRGRAPH_CORS_ORIGINS": "http://localhost:5173, http://example.org",
            "AIRGRAPH_SEED_DEMO": "1",
        })
        assert settings.host == "127.0.0.1"
        assert settings.port == 8080
        assert settings.reload is True
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["http://localhost:5173", "http://example.org"]
        assert settings.seed_demo is True

    def test_invalid_values_fall_back_to_defaults(self, caplog):
        settings = Settings.from_env({"AIRGRAPH_PORT": "eighty", "AIRGRAPH_SEED_DEMO": "maybe"})
        assert settings.port == 3001
        assert settings.seed_demo is False
        assert "AIRGRAPH_PORT" in caplog.text
        assert "AIRGRAPH_SEED_DEMO" in caplog.text
