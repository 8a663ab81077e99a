"""
FastAPI Dependency Injection Providers.

Hierarchy:
    1. get_settings() - loads and caches configuration
    2. get_service_config() - validated ServiceConfig
    3. get_resource_cache() - the process-wide ResourceCache
    4. get_http_client() - the shared httpx.AsyncClient (owned by the app lifespan)
    5. get_generation_service() / get_audio_proxy() - per-request wiring

The cache is a singleton: the generation route writes to it and the audio
route reads from it, so both must receive the same handle. Tests replace
get_resource_cache and get_http_client through app.dependency_overrides.
"""
from __future__ import annotations

import os
from functools import lru_cache

import httpx
from fastapi import Depends, Request

from voicegen.audio.cache import ResourceCache
from voicegen.audio.proxy import AudioProxy
from voicegen.audio.speech import SpeechClient
from voicegen.audio.upload import UploadClient
from voicegen.core.config import ServiceConfig, Settings, UpstreamConfig, load_settings
from voicegen.services.generation import GenerationService


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    Reads VOICEGEN_SETTINGS (default config/settings.yaml); a missing file
    means built-in defaults.
    """
    return load_settings(os.getenv("VOICEGEN_SETTINGS", "config/settings.yaml"))


@lru_cache(maxsize=1)
def get_service_config() -> ServiceConfig:
    return get_settings().get_service_config()


@lru_cache(maxsize=1)
def get_resource_cache() -> ResourceCache:
    """The single code -> upstream URL map for this process."""
    return ResourceCache(eviction=get_service_config().cache.eviction)


def create_http_client(config: UpstreamConfig) -> httpx.AsyncClient:
    """
    Build the shared upstream client.

    timeout_s == 0 disables timeouts entirely: a request runs until the
    upstream answers or the connection fails.
    """
    timeout = httpx.Timeout(config.timeout_s) if config.timeout_s > 0 else httpx.Timeout(None)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Return the app's upstream client, creating it if the lifespan did not run."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = create_http_client(get_service_config().upstream)
        request.app.state.http_client = client
    return client


def get_generation_service(
    cache: ResourceCache = Depends(get_resource_cache),
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ServiceConfig = Depends(get_service_config),
) -> GenerationService:
    return GenerationService(
        cache=cache,
        speech=SpeechClient(client, config.upstream),
        uploader=UploadClient(client, config.upstream),
        config=config,
    )


def get_audio_proxy(
    cache: ResourceCache = Depends(get_resource_cache),
    client: httpx.AsyncClient = Depends(get_http_client),
    config: ServiceConfig = Depends(get_service_config),
) -> AudioProxy:
    return AudioProxy(cache, client, config.upstream)
