"""Temporal client construction shared by the worker and the HTTP front-end."""

from __future__ import annotations

import logging
from pathlib import Path

from temporalio.client import Client, TLSConfig
from temporalio.contrib.pydantic import pydantic_data_converter

from .config import Settings

logger = logging.getLogger(__name__)


async def connect_client(settings: Settings) -> Client:
    """Connect to Temporal using the configured endpoint, namespace, and optional mTLS."""
    tls: TLSConfig | bool = False
    if settings.tls_enabled:
        tls = TLSConfig(
            client_cert=Path(settings.temporal_tls_cert_path).read_bytes(),
            client_private_key=Path(settings.temporal_tls_key_path).read_bytes(),
        )
    logger.info(
        "connecting to temporal at %s (namespace=%s, tls=%s)",
        settings.temporal_host_port,
        settings.temporal_namespace,
        bool(tls),
    )
    return await Client.connect(
        settings.temporal_host_port,
        namespace=settings.temporal_namespace,
        tls=tls,
        data_converter=pydantic_data_converter,
    )
