"""Shared fixtures: an in-memory backend standing in for the REST API."""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from cineweb.gateway.base import ApiError, BaseGateway, GatewayError, Resource
from cineweb.models import Record


class InMemoryGateway(BaseGateway):
    """Stores records per collection and assigns string ids like json-server."""

    def __init__(self):
        self.collections: Dict[Resource, List[Record]] = {r: [] for r in Resource}
        self.calls: List[Tuple[str, Resource]] = []
        self.failures: Dict[Tuple[str, Resource], GatewayError] = {}
        self.gate: Optional[asyncio.Event] = None
        self.closed = False
        self._next_id = 1

    def _new_id(self) -> str:
        record_id = str(self._next_id)
        self._next_id += 1
        return record_id

    def seed(self, resource: Resource, **fields) -> Record:
        fields.setdefault("id", self._new_id())
        record = resource.record_type.model_validate(fields)
        self.collections[resource].append(record)
        return record

    def fail(self, operation: str, resource: Resource, error: GatewayError):
        self.failures[(operation, resource)] = error

    def hold(self):
        """Make the next create wait until release() is called."""
        self.gate = asyncio.Event()

    def release(self):
        self.gate.set()

    def _check(self, operation: str, resource: Resource):
        self.calls.append((operation, resource))
        error = self.failures.get((operation, resource))
        if error is not None:
            raise error

    async def list(self, resource: Resource):
        self._check("list", resource)
        return list(self.collections[resource])

    async def create(self, resource: Resource, payload: dict):
        self._check("create", resource)
        if self.gate is not None:
            await self.gate.wait()
        record = resource.record_type.model_validate({**payload, "id": self._new_id()})
        self.collections[resource].append(record)
        return record

    async def delete(self, resource: Resource, record_id: str):
        self._check("delete", resource)
        records = self.collections[resource]
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            raise ApiError(404, f"/{resource.value}/{record_id}")
        self.collections[resource] = remaining

    def operations(self, operation: str) -> List[Resource]:
        return [resource for op, resource in self.calls if op == operation]

    def close(self):
        self.closed = True


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def notes():
    """Collects user notifications."""
    return []
