"""Tests for EngineConfig and its effect on pipelines."""

from __future__ import annotations

import logging

import pytest

from amino import EngineConfig, PipelineConfigError, ok, pipeline


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so values loaded from .env files are removed on teardown
    for name in ("AMINO_ASSERTION_MESSAGE", "AMINO_TRACE_STEPS", "AMINO_LOG_UNEXPECTED"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.mark.unit
class TestEngineConfigFromEnv:
    def test_defaults(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        config = EngineConfig.from_env()

        assert config == EngineConfig()
        assert config.assertion_message == "Assertion failed"
        assert config.trace_steps is False
        assert config.log_unexpected is True

    def test_reads_environment(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("AMINO_ASSERTION_MESSAGE", "invalid input")
        clean_env.setenv("AMINO_TRACE_STEPS", "yes")
        clean_env.setenv("AMINO_LOG_UNEXPECTED", "0")

        config = EngineConfig.from_env()

        assert config.assertion_message == "invalid input"
        assert config.trace_steps is True
        assert config.log_unexpected is False

    def test_reads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "settings.env"
        env_file.write_text("AMINO_TRACE_STEPS=true\nAMINO_ASSERTION_MESSAGE=from file\n")

        config = EngineConfig.from_env(env_file)

        assert config.trace_steps is True
        assert config.assertion_message == "from file"

    def test_environment_wins_over_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "settings.env"
        env_file.write_text("AMINO_ASSERTION_MESSAGE=from file\n")
        clean_env.setenv("AMINO_ASSERTION_MESSAGE", "from env")

        assert EngineConfig.from_env(env_file).assertion_message == "from env"

    def test_custom_prefix(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("MYAPP_TRACE_STEPS", "on")

        assert EngineConfig.from_env(prefix="MYAPP_").trace_steps is True

    def test_invalid_flag(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("AMINO_TRACE_STEPS", "sometimes")

        with pytest.raises(PipelineConfigError, match="AMINO_TRACE_STEPS"):
            EngineConfig.from_env()


@pytest.mark.unit
class TestConfigInPipelines:
    @pytest.mark.asyncio
    async def test_default_assertion_message_from_config(self):
        config = EngineConfig(assertion_message="rejected")
        result = await pipeline(config=config).assert_(lambda v, c: False).run(1)

        assert str(result.error) == "rejected"

    @pytest.mark.asyncio
    async def test_trace_steps_logs_each_step(self, caplog):
        pipe = pipeline(config=EngineConfig(trace_steps=True)).step(
            lambda v, c: ok(v)
        ).step(lambda v, c: ok(v))

        with caplog.at_level(logging.DEBUG, logger="amino.pipeline"):
            await pipe.run(1)

        assert "Running step 1/2" in caplog.text
        assert "Running step 2/2" in caplog.text

    @pytest.mark.asyncio
    async def test_log_unexpected_can_be_disabled(self, caplog):
        def explode(value, ctx):
            raise RuntimeError("quiet")

        pipe = pipeline(config=EngineConfig(log_unexpected=False)).step(explode)

        with caplog.at_level(logging.WARNING, logger="amino.pipeline"):
            result = await pipe.run(1)

        assert isinstance(result.error, RuntimeError)
        assert "quiet" not in caplog.text
