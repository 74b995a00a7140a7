"""
Client for the external (upstream) logistics services.

A 404 or an empty body is a miss (``None``); every other failure becomes
an ``UpstreamError``. Results are never cached or written back locally.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from backoffice.app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ExternalServiceClient:
    """
    Thin wrapper around a shared ``httpx.AsyncClient`` for one upstream base URL.

    Args:
        name: Label used in logs and errors
        base_url: Upstream base URL; an empty value disables the client
        http_client: Shared async HTTP client
        bearer_token: Credential sent as ``Authorization: Bearer``
    """

    def __init__(self, name: str, base_url: str, http_client: httpx.AsyncClient, bearer_token: str = ""):
        self.name = name
        self.base_url = (base_url or "").rstrip("/")
        self.http_client = http_client
        self.bearer_token = bearer_token

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def build_url(self, *path_parts: Any) -> str:
        parts = [self.base_url] + [quote(str(part), safe="") for part in path_parts]
        return "/".join(parts)

    async def get_json(self, *path_parts: Any, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET a JSON document; ``None`` means the upstream does not have it."""
        if not self.enabled:
            logger.debug("%s is not configured, skipping external lookup", self.name)
            return None

        url = self.build_url(*path_parts)
        headers = {"Accept": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        try:
            response = await self.http_client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(self.name, f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            logger.info("%s has no record at %s", self.name, url)
            return None
        if response.is_error:
            raise UpstreamError(self.name, f"HTTP {response.status_code} from {url}")
        if not response.content.strip():
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(self.name, f"invalid JSON from {url}") from e

        if body is None or body == [] or body == {}:
            return None
        return body

    async def fetch_one(self, schema: Type[ModelT], *path_parts: Any) -> Optional[ModelT]:
        body = await self.get_json(*path_parts)
        if body is None:
            return None
        try:
            return schema.model_validate(body)
        except PydanticValidationError as e:
            raise UpstreamError(self.name, f"unexpected payload: {e.error_count()} validation errors") from e

    async def fetch_many(self, schema: Type[ModelT], params: Optional[Dict[str, Any]] = None) -> List[ModelT]:
        body = await self.get_json(params=params)
        if body is None:
            return []
        if isinstance(body, dict):
            body = [body]
        try:
            return TypeAdapter(List[schema]).validate_python(body)
        except PydanticValidationError as e:
            raise UpstreamError(self.name, f"unexpected payload: {e.error_count()} validation errors") from e
