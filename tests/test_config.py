# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_indexer.config import FETCH_TIMEOUT, MAX_DEPTH, IndexerConfig, SiteConfig, load_config

SITES_YAML = "sites:\n  - name: Example\n    url: http://example.com/\n"


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        (SITES_YAML, ".yaml", None),
        (json.dumps({"sites": [{"name": "Example", "url": "http://example.com"}]}), ".json", None),
        ("{}", ".json", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("- just\n- a list", ".yml", TypeError),
        ("{broken json", ".json", ValueError),
        (SITES_YAML, ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, IndexerConfig)
        assert cfg.sites[0].url == "http://example.com"


def test_defaults():
    cfg = IndexerConfig(sites=[])
    assert cfg.max_depth == MAX_DEPTH == 10
    assert cfg.timeout == FETCH_TIMEOUT == 15.0
    assert cfg.concurrency >= 1
    assert cfg.download_dir is None


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_site_url_must_be_http():
    with pytest.raises(ValidationError):
        SiteConfig(name="FTP", url="ftp://example.com")


def test_site_configs_compare_by_value():
    a = SiteConfig(name="A", url="https://a.example//")
    b = SiteConfig(name="A", url="https://a.example")
    assert a == b
    assert hash(a) == hash(b)


def test_unknown_keys_rejected(tmp_path):
    cfg_path = write_file(tmp_path, SITES_YAML + "rate_limit: 5\n", ".yaml")
    with pytest.raises(ValidationError):
        load_config(cfg_path)
