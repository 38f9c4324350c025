"""Shared application state and project access checks."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from .build import CompileInfo
from .errors import QuotaLimitReachedError, RpcError
from .metrics import Metrics
from .project_data import ProjectData
from .registry import Registry
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)


def validate_project_quota(project_data: ProjectData) -> None:
    """Raise QuotaLimitReachedError unless the project's quota is valid."""
    if not project_data.quota.is_valid:
        raise QuotaLimitReachedError()


def _validate_access(project: ProjectData, project_id: str) -> None:
    if not project.is_enabled:
        raise RpcError("project is inactive")
    if not any(key.is_valid and key.value == project_id for key in project.keys):
        raise RpcError("invalid project key")


@dataclass
class AppState:
    """Everything request handlers share."""

    providers: Any
    metrics: Metrics
    registry: Registry
    config: Any = None
    identity_cache: KeyValueStorage | None = None
    compile_info: CompileInfo = field(default_factory=CompileInfo)
    uptime: float = field(default_factory=time.monotonic)

    async def update_provider_weights(self) -> None:
        await self.providers.update_weights(self.metrics)

    async def _get_project_data_validated(self, project_id: str) -> ProjectData:
        try:
            project = await self.registry.project_data(project_id)
        except RpcError:
            self.metrics.add_rejected_project()
            raise

        try:
            _validate_access(project, project_id)
        except RpcError as exc:
            self.metrics.add_rejected_project()
            logger.info(
                "Denied access for project: %s, with reason: %s", project_id, exc
            )
            raise

        return project

    async def validate_project_access(self, project_id: str) -> None:
        """Raise RpcError unless the project may use the service."""
        await self._get_project_data_validated(project_id)

    async def validate_project_access_and_quota(self, project_id: str) -> None:
        """Like validate_project_access, and also require quota left."""
        project = await self._get_project_data_validated(project_id)
        try:
            validate_project_quota(project)
        except QuotaLimitReachedError:
            self.metrics.add_quota_limited_project()
            logger.info(
                "Quota limit reached: project_id=%s max=%s current=%s",
                project_id,
                project.quota.max,
                project.quota.current,
            )
            raise