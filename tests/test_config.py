"""Tests for figma_intent.config and figma_intent.logging_config."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from figma_intent import config, logging_config
from figma_intent.cache import CacheOperation


class TestLoadCacheConfig:
    def test_defaults(self):
        cfg = config.load_cache_config()
        assert cfg.max_size == int(config.FIGMA_CACHE_MAX_SIZE)
        assert cfg.ttl_for(CacheOperation.TOKENS) == int(config.FIGMA_CACHE_TTL_TOKENS)

    def test_empty_ttl_means_default(self, monkeypatch):
        monkeypatch.setattr(config, "FIGMA_CACHE_DEFAULT_TTL", "120")
        monkeypatch.setattr(config, "FIGMA_CACHE_TTL_FRAMES", "")
        cfg = config.load_cache_config()
        assert cfg.ttl_by_type.frames is None
        assert cfg.ttl_for(CacheOperation.FRAMES) == 120

    def test_disabled(self, monkeypatch):
        monkeypatch.setattr(config, "FIGMA_CACHE_ENABLED", False)
        assert config.load_cache_config().enabled is False

    @pytest.mark.parametrize("name, value", [
        ("FIGMA_CACHE_MAX_SIZE", "0"),
        ("FIGMA_CACHE_MAX_SIZE", "lots"),
        ("FIGMA_CACHE_DEFAULT_TTL", "-5"),
        ("FIGMA_CACHE_TTL_FILE", "-1"),
    ])
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setattr(config, name, value)
        with pytest.raises(ValidationError):
            config.load_cache_config()


@pytest.fixture
def fresh_logger():
    """Yield a unique logger name and undo its configuration afterwards."""
    names = []

    def _make(name):
        names.append(name)
        return name

    yield _make
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = True
        logging_config._configured_loggers.discard(name)


class TestSetupLogger:
    def test_file_and_console_handlers(self, tmp_path, fresh_logger):
        name = fresh_logger("figma_intent_test.setup")
        logger = logging_config.setup_logger(name, "test.log", log_dir=tmp_path)

        assert len(logger.handlers) == 2
        assert logger.propagate is False
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in (tmp_path / "test.log").read_text(encoding="utf-8")

    def test_configured_once(self, tmp_path, fresh_logger):
        name = fresh_logger("figma_intent_test.once")
        first = logging_config.setup_logger(name, "once.log", log_dir=tmp_path)
        second = logging_config.setup_logger(name, "once.log", log_dir=tmp_path)
        assert first is second
        assert len(second.handlers) == 2

    def test_creates_log_dir(self, tmp_path, fresh_logger):
        target = tmp_path / "nested" / "logs"
        logging_config.setup_logger(fresh_logger("figma_intent_test.dir"), "x.log", log_dir=target)
        assert (target / "x.log").exists()

    def test_named_helpers(self, tmp_path, fresh_logger):
        fresh_logger("figma_intent")
        fresh_logger("figma_intent.cache")
        assert logging_config.get_pipeline_logger(tmp_path).name == "figma_intent"
        assert logging_config.get_cache_logger(tmp_path).name == "figma_intent.cache"
        assert (tmp_path / "pipeline.log").exists()
        assert (tmp_path / "cache.log").exists()

    def test_module_loggers_reach_pipeline_log(self, tmp_path, fresh_logger):
        fresh_logger("figma_intent")
        root = logging_config.get_pipeline_logger(tmp_path)
        logging.getLogger("figma_intent.pipeline").info("tokens computed")
        for handler in root.handlers:
            handler.flush()
        content = (tmp_path / "pipeline.log").read_text(encoding="utf-8")
        assert "[figma_intent.pipeline] [INFO] tokens computed" in content
