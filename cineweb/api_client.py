"""
Cinema backend REST client
==========================

Talks to the cinema data API (json-server style collections):

- GET    /{collection}       -> array of records
- POST   /{collection}       -> created record (server assigns id)
- DELETE /{collection}/{id}  -> empty body

Collections: filmes, salas, sessoes, ingressos.

Each call is a single attempt (no retries). The blocking requests call runs
in a worker thread so callers on the event loop suspend only at I/O.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from cineweb import config
from cineweb.gateway.base import (
    ApiError,
    BaseGateway,
    InvalidResponseError,
    NetworkError,
    Resource,
)
from cineweb.models import Record

logger = logging.getLogger(__name__)


class CinemaApiClient(BaseGateway):
    """Client for the cinema backend REST API"""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update(config.HEADERS)
        self.stats = {"requests": 0, "errors": 0}

    def _url(self, resource: Resource, record_id: str = None) -> str:
        url = f"{self.base_url}/{resource.value}"
        if record_id is not None:
            url = f"{url}/{record_id}"
        return url

    def _send(self, method: str, url: str, payload: Optional[Dict] = None) -> Any:
        """Perform one HTTP request and decode its JSON body (None when empty)"""
        headers = {'Content-Type': 'application/json'} if payload is not None else None
        try:
            self.stats["requests"] += 1
            logger.debug(f"{method} {url}")
            response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            self.stats["errors"] += 1
            logger.error(f"Network error on {method} {url}: {e}")
            raise NetworkError(f"Network error on {method} {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            self.stats["errors"] += 1
            logger.warning(f"HTTP {response.status_code}: {method} {url}")
            raise ApiError(response.status_code, url)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            self.stats["errors"] += 1
            raise InvalidResponseError(f"Body of {method} {url} is not JSON", response.status_code) from e

    def _parse(self, resource: Resource, data: Any) -> Record:
        try:
            return resource.record_type.model_validate(data)
        except ValidationError as e:
            raise InvalidResponseError(f"Unexpected {resource.value} record: {e}") from e

    async def list(self, resource: Resource) -> List[Record]:
        data = await asyncio.to_thread(self._send, "GET", self._url(resource))
        if not isinstance(data, list):
            raise InvalidResponseError(f"Expected an array of {resource.value}")
        records = [self._parse(resource, item) for item in data]
        logger.debug(f"Fetched {len(records)} {resource.value}")
        return records

    async def create(self, resource: Resource, payload: dict) -> Record:
        body = {k: v for k, v in payload.items() if k != "id"}
        data = await asyncio.to_thread(self._send, "POST", self._url(resource), body)
        record = self._parse(resource, data)
        logger.info(f"Created {resource.value} record {record.id}")
        return record

    async def delete(self, resource: Resource, record_id: str) -> None:
        await asyncio.to_thread(self._send, "DELETE", self._url(resource, record_id))
        logger.info(f"Deleted {resource.value} record {record_id}")

    def close(self):
        self.session.close()

    def print_stats(self):
        print(f"\n{'='*50}")
        print("📊 API CLIENT STATISTICS")
        print(f"{'='*50}")
        print(f"   Requests made:     {self.stats['requests']}")
        print(f"   Errors:            {self.stats['errors']}")
        print(f"{'='*50}\n")
