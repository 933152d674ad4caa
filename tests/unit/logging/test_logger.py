import os

import msgspec
import pytest

from stingray_link.connection.logging_models import ConsoleDebug, ConsoleInfo
from stingray_link.logging import Logger, LoggingConfig, LogLevel


@pytest.fixture
def logging_config():
    config = LoggingConfig()
    level = config.level
    output = config.output

    yield config

    config.update(log_level=level.value.lower(), log_output=output.value.lower())


class TestLogLevel:
    def test_to_level(self):
        assert LogLevel.to_level("warning") == LogLevel.WARN
        assert LogLevel.to_level("error") == LogLevel.ERROR
        assert LogLevel.to_level("unknown") == LogLevel.INFO

    def test_severity_orders_levels(self):
        assert LogLevel.TRACE.severity < LogLevel.DEBUG.severity < LogLevel.INFO.severity
        assert LogLevel.WARN.severity < LogLevel.ERROR.severity < LogLevel.FATAL.severity

    def test_warning_alias_sets_level(self, logging_config):
        logging_config.update(log_level="warning")

        assert logging_config.level == LogLevel.WARN
        assert logging_config.enabled("test.alias", LogLevel.ERROR)
        assert not logging_config.enabled("test.alias", LogLevel.INFO)


class TestLogger:
    @pytest.mark.asyncio
    async def test_writes_template_to_stream(self, capsys, logging_config):
        logging_config.update(log_level="debug", log_output="stdout")

        logger = Logger()
        await logger.log(
            ConsoleInfo(message="Connected to ws://127.0.0.1:14000", host="127.0.0.1", port=14000),
            name="test.stream",
        )

        output = capsys.readouterr().out
        assert "INFO" in output
        assert "Connected to ws://127.0.0.1:14000" in output

    @pytest.mark.asyncio
    async def test_level_filter(self, capsys, logging_config):
        logging_config.update(log_level="error", log_output="stdout")

        logger = Logger()
        await logger.log(
            ConsoleDebug(message="hidden", host="127.0.0.1", port=1),
            name="test.filtered",
        )

        assert "hidden" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_writes_json_lines_to_file(self, temp_directory, logging_config):
        logging_config.update(log_level="debug")

        logger = Logger()
        path = os.path.join(temp_directory, "link.json")
        logger.configure(name="test.file", path=path)

        await logger.log(
            ConsoleInfo(message="to file", host="127.0.0.1", port=14001),
            name="test.file",
        )
        await logger.close()

        with open(path, "rb") as log_file:
            lines = log_file.read().splitlines()

        assert len(lines) == 1

        record = msgspec.json.decode(lines[0])
        assert record["logger_name"] == "test.file"
        assert record["entry"]["message"] == "to file"
        assert record["entry"]["port"] == 14001

    @pytest.mark.asyncio
    async def test_context_opens_and_closes_file(self, temp_directory, logging_config):
        logging_config.update(log_level="debug")

        logger = Logger()
        path = os.path.join(temp_directory, "context.json")

        async with logger.context(name="test.context", path=path) as stream:
            await stream.log(ConsoleDebug(message="inside", host="127.0.0.1", port=14002))

        with open(path, "rb") as log_file:
            records = [msgspec.json.decode(line) for line in log_file.read().splitlines()]

        assert [record["entry"]["message"] for record in records] == ["inside"]
        assert records[0]["entry"]["level"] == "DEBUG"
