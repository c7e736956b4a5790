"""
Configuration Tests
===================

Tests for YAML loading, environment overrides and pipeline wiring.
"""

import pytest
from pydantic import ValidationError

from image_bundler.config import load_config
from image_bundler.pipeline.invocation import create_pipeline, create_renderer
from image_bundler.rendering.local import LocalSizeRenderer
from image_bundler.rendering.remote import RemoteSizeRenderer
from image_bundler.storage.client import LocalObjectStore


ENV_VARS = [
    "BUNDLER_STORAGE_BACKEND",
    "BUNDLER_PHOTO_BUCKET",
    "BUNDLER_OUTPUT_BUCKET",
    "BUNDLER_LOCAL_ROOT",
    "AWS_REGION",
    "BUNDLER_MAX_CONCURRENCY",
    "BUNDLER_RENDER_STRATEGY",
    "BUNDLER_RENDER_URL",
    "BUNDLER_RENDER_AUTH_TOKEN",
    "HTTP_TIMEOUT",
    "BUNDLER_FONT_KEY",
    "BUNDLER_STAGING",
    "BUNDLER_SCRATCH_DIR",
    "BUNDLER_NUMBERING",
    "BUNDLER_LOG_LEVEL",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "storage:\n"
        "  backend: local\n"
        f"  local_root: {tmp_path / 'storage'}\n"
        "  photo_bucket: photos\n"
        "render:\n"
        "  strategy: local\n"
        "archive:\n"
        "  numbering: slot\n",
        encoding="utf-8",
    )
    return str(path)


def test_defaults(tmp_path):
    settings = load_config(str(tmp_path / "absent.yaml"))

    assert settings.storage.photo_bucket == "phitemspics"
    assert settings.storage.output_bucket == "phbundledimages"
    assert settings.render.strategy == "remote"
    assert settings.render.timeout_seconds is None
    assert settings.archive.staging == "memory"
    assert settings.archive.numbering == "dense"
    assert settings.retrieval.max_concurrency == 1


def test_yaml_values(config_file):
    settings = load_config(config_file)

    assert settings.storage.backend == "local"
    assert settings.storage.photo_bucket == "photos"
    assert settings.render.strategy == "local"
    assert settings.archive.numbering == "slot"


def test_env_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT", "7.5")
    monkeypatch.setenv("BUNDLER_STAGING", "file")
    monkeypatch.setenv("BUNDLER_NUMBERING", "dense")
    monkeypatch.setenv("BUNDLER_MAX_CONCURRENCY", "4")
    monkeypatch.setenv("PORT", "9000")

    settings = load_config(config_file)

    assert settings.render.timeout_seconds == 7.5
    assert settings.archive.staging == "file"
    assert settings.archive.numbering == "dense"
    assert settings.retrieval.max_concurrency == 4
    assert settings.server.port == 9000


def test_invalid_value_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("BUNDLER_STAGING", "s3")
    with pytest.raises(ValidationError):
        load_config(str(tmp_path / "absent.yaml"))


def test_create_pipeline_from_settings(config_file):
    settings = load_config(config_file)

    pipeline = create_pipeline(settings)

    assert isinstance(pipeline.retriever.store, LocalObjectStore)
    assert pipeline.retriever.bucket == "photos"
    assert isinstance(pipeline.renderer, LocalSizeRenderer)
    assert pipeline.builder.numbering == "slot"
    assert pipeline.publisher.bucket == "phbundledimages"


def test_remote_renderer_gets_timeout(tmp_path, monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT", "3")
    monkeypatch.setenv("BUNDLER_RENDER_AUTH_TOKEN", "token")
    settings = load_config(str(tmp_path / "absent.yaml"))

    renderer = create_renderer(settings, store=None)

    assert isinstance(renderer, RemoteSizeRenderer)
    assert renderer.timeout == 3.0
    assert renderer._auth_token == "token"
