# -*- coding: utf-8 -*-
"""Clients for the Metadata Store read/write endpoints.

Both clients expose the same two calls:
  fetch() -> MetadataSnapshot
  save(texture_id, name, category) -> None   (raises FetchError on failure)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .errors import FetchError, ValidationError
from .metadata_store import MetadataStore, normalize_doc

logger = logging.getLogger(__name__)

TEXTURE_DATA_PATH = "/api/texture-data"


@dataclass(frozen=True)
class MetadataSnapshot:
    textures: Dict[str, Dict[str, str]] = field(default_factory=dict)
    categories: List[str] = field(default_factory=list)

    @staticmethod
    def from_payload(payload: Any) -> "MetadataSnapshot":
        if not isinstance(payload, dict):
            raise FetchError("texture data payload is not an object")
        doc = normalize_doc(payload)
        return MetadataSnapshot(textures=doc["textures"], categories=doc["categories"])

    def to_payload(self) -> Dict[str, Any]:
        return {
            "textures": {k: dict(v) for k, v in self.textures.items()},
            "categories": list(self.categories),
        }


class LocalMetadataClient:
    """In-process client over a MetadataStore (same server)."""

    def __init__(self, store: MetadataStore):
        self.store = store

    def fetch(self) -> MetadataSnapshot:
        try:
            return MetadataSnapshot.from_payload(self.store.snapshot())
        except OSError as e:
            raise FetchError(f"Cannot read texture data: {e}") from e

    def save(self, texture_id: str, name: str, category: str) -> None:
        try:
            self.store.set_texture(texture_id, name, category)
        except ValidationError as e:
            raise FetchError(str(e), status_code=400) from e
        except OSError as e:
            raise FetchError(f"Cannot write texture data: {e}") from e


class HttpMetadataClient:
    """httpx client for a remote texture-data endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        kwargs: Dict[str, Any] = {"base_url": base_url.rstrip("/")}
        if timeout is not None:
            kwargs["timeout"] = float(timeout)
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.Client(**kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpMetadataClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def fetch(self) -> MetadataSnapshot:
        try:
            r = self._client.get(TEXTURE_DATA_PATH)
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"texture data read failed: HTTP {e.response.status_code}", status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            raise FetchError(f"texture data read failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"texture data is not JSON: {e}") from e
        return MetadataSnapshot.from_payload(payload)

    def save(self, texture_id: str, name: str, category: str) -> None:
        body = {"textureId": texture_id, "name": name, "category": category}
        try:
            r = self._client.post(TEXTURE_DATA_PATH, json=body)
        except httpx.HTTPError as e:
            raise FetchError(f"texture data write failed: {e}") from e
        if not r.is_success:
            raise FetchError(f"texture data write failed: HTTP {r.status_code}", status_code=r.status_code)
