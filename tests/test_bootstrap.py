# =============================================================================
# USERHUB BACKEND - BOOTSTRAP TESTS
# =============================================================================
# File: tests/test_bootstrap.py
# Description: Startup wiring, logging configuration and settings validation
# =============================================================================

import json
import logging

import fakeredis.aioredis
import pytest
from pydantic import ValidationError

from core.bootstrap import bootstrap, shutdown
from core.config import Settings
from core.logging_config import JSONFormatter, configure_logging, request_id_var


class TestBootstrap:

    async def test_builds_container(self, settings: Settings, fake_server):
        client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)

        container = await bootstrap(settings, redis_client=client)

        assert container.db.is_connected
        assert await container.redis.check_health()
        assert container.session_manager is not None
        await shutdown(container)
        await client.aclose()

    async def test_tolerates_unreachable_redis(self, settings: Settings, fake_server):
        fake_server.connected = False
        client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)

        container = await bootstrap(settings, redis_client=client)

        assert await container.redis.check_health() is False
        await shutdown(container)
        await client.aclose()


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

    def test_file_handlers_split_by_level(self, settings: Settings, tmp_path):
        configure_logging(settings.model_copy(update={"log_to_file": True, "log_level": "INFO"}))
        logger = logging.getLogger("userhub.test")

        logger.info("hello")
        logger.error("boom")
        for handler in logging.getLogger().handlers:
            handler.flush()

        combined = (tmp_path / "logs" / "combined.log").read_text()
        errors = (tmp_path / "logs" / "error.log").read_text()
        assert "hello" in combined and "boom" in combined
        assert "hello" not in errors and "boom" in errors

    def test_reconfiguring_does_not_duplicate_handlers(self, settings: Settings):
        configure_logging(settings)
        count = len(logging.getLogger().handlers)

        configure_logging(settings)

        assert len(logging.getLogger().handlers) == count

    def test_json_formatter_includes_request_id(self):
        record = logging.LogRecord("userhub", logging.INFO, __file__, 1, "hi %s", ("there",), None)
        record.request_id = "req-1"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hi there"
        assert entry["level"] == "INFO"
        assert entry["request_id"] == "req-1"

    def test_request_id_defaults_to_empty(self):
        assert request_id_var.get() == ""


class TestSettings:

    def test_short_jwt_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_access_secret="short")

    def test_memory_database_url(self, settings: Settings):
        assert settings.database_url == "sqlite+aiosqlite:///:memory:"

    def test_prefixes_are_normalised(self):
        custom = Settings(_env_file=None, api_prefix="api/v2/", upload_url_prefix="files")

        assert custom.api_prefix == "/api/v2"
        assert custom.upload_url_prefix == "/files"
