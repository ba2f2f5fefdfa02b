"""Adaptador HTTP usado por los casos de uso del cliente.

Los casos de uso dependen solo de `HttpAdapter`; `HttpxAdapter` es la
implementación real sobre `httpx.AsyncClient`. En pruebas se puede pasar un
`httpx.MockTransport`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


class HttpAdapterError(Exception):
    """Respuesta no exitosa o falla de transporte."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class HttpAdapter(ABC):
    @abstractmethod
    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any: ...

    @abstractmethod
    async def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any: ...

    @abstractmethod
    async def put(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any: ...

    @abstractmethod
    async def delete(self, path: str) -> Any: ...


class HttpxAdapter(HttpAdapter):
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxAdapter":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._get_client().request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as err:
            logger.warning("Fallo de transporte en %s %s: %s", method, path, err)
            raise HttpAdapterError(f"Error de conexión: {err}") from err

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            raise HttpAdapterError(
                message or f"Error HTTP {response.status_code}", response.status_code, data
            )
        return data

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        return await self._request("GET", path, params=clean)

    async def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._request("POST", path, json=dict(body or {}))

    async def put(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._request("PUT", path, json=dict(body or {}))

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)
