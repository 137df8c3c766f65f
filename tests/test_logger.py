# File: tests/test_logger.py
import logging

import pytest

from site_indexer.logger import LOGGER_NAME, SessionLogger, configure, get_logger


@pytest.fixture()
def log_file(tmp_path):
    path = tmp_path / "logs" / "indexer.log"
    configure(level="DEBUG", log_file=path, log_format="%(name)s %(message)s")
    yield path
    configure()


def read(path) -> str:
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()
    return path.read_text(encoding="utf-8")


def test_component_logger_writes_through_project_handlers(log_file):
    get_logger("crawler").debug("claimed %s", "http://a.test")
    assert "SiteIndexer.crawler claimed http://a.test" in read(log_file)


def test_session_logger_prefixes_messages(log_file):
    SessionLogger(logging.getLogger(LOGGER_NAME), "abc123").info("Indexing started")
    assert "[session abc123] Indexing started" in read(log_file)


def test_configure_replaces_handlers(tmp_path):
    try:
        configure(log_file=tmp_path / "one.log")
        project = configure(log_file=tmp_path / "two.log")
        files = [h.baseFilename for h in project.handlers if hasattr(h, "baseFilename")]
        assert files == [str(tmp_path / "two.log")]
        assert len(project.handlers) == 2
        assert project.propagate is False
    finally:
        configure()
