"""
Transport for the client core.

`WebsiteBackend` is what the controllers depend on; `HttpWebsiteBackend`
speaks the REST API served by `siteforge.create_app`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from siteforge.config import ClientConfig
from siteforge.domain.invariants.exceptions import GUARD_VIOLATIONS
from .errors import RemoteError
from .records import (
    EditRequest,
    EditResult,
    PageVersion,
    PipelineConfig,
    ProjectSnapshot,
    Section,
    SkillSnapshot,
    TemplateSnapshot,
)

logger = logging.getLogger(__name__)


class WebsiteBackend(Protocol):
    async def fetch_project_status(self, project_id: str) -> ProjectSnapshot: ...

    async def save_selection(self, project_id: str, config: PipelineConfig) -> ProjectSnapshot: ...

    async def trigger_pipeline_start(self, project_id: str, config: PipelineConfig) -> None: ...

    async def fetch_template(self, template_id: str) -> Optional[TemplateSnapshot]: ...

    async def list_versions(self, project_id: str, path: str) -> List[PageVersion]: ...

    async def fetch_page(self, page_id: str) -> PageVersion: ...

    async def create_page(self, project_id: str, path: str, sections: List[Section]) -> PageVersion: ...

    async def create_draft(self, page_id: str) -> PageVersion: ...

    async def save_draft(
        self,
        page_id: str,
        sections: List[Section],
        chat_history: Optional[Dict[str, Any]] = None,
        if_unmodified_since: Optional[str] = None,
    ) -> PageVersion: ...

    async def publish(self, page_id: str) -> PageVersion: ...

    async def delete_version(self, page_id: str) -> None: ...

    async def delete_all_versions(self, project_id: str, path: str) -> int: ...

    async def restore_version(self, page_id: str) -> PageVersion: ...

    async def edit_element(self, page_id: str, request: EditRequest) -> EditResult: ...

    async def fetch_skill_status(self, skill_id: str) -> SkillSnapshot: ...

    async def start_skill_generation(self, skill_id: str) -> SkillSnapshot: ...


class HttpWebsiteBackend:
    """
    `WebsiteBackend` over HTTP with a `requests.Session`.

    Calls block, so each one runs in a worker thread; the event loop only
    suspends at those awaits.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        tenant_id: Optional[str] = None,
        *,
        actor_id: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or ClientConfig.API_BASE_URL).rstrip("/")
        self.timeout = timeout or ClientConfig.HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

        tenant_id = tenant_id or ClientConfig.TENANT_ID
        if not tenant_id:
            raise ValueError("tenant_id is required")
        self.session.headers["X-Tenant-ID"] = tenant_id

        actor_id = actor_id or ClientConfig.ACTOR_ID
        if actor_id:
            self.session.headers["X-Actor-ID"] = actor_id

    # ------------------------
    # Plumbing
    # ------------------------

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteError(f"{method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.ok:
            return payload

        code = payload.get("error") if isinstance(payload, dict) else None
        message = (payload.get("message") if isinstance(payload, dict) else None) or response.reason

        # Guard rejections come back as the same exception the client raises
        if response.status_code == 409 and code in GUARD_VIOLATIONS:
            raise GUARD_VIOLATIONS[code](message)

        logger.debug("%s %s returned %s: %s", method, path, response.status_code, message)
        raise RemoteError(
            f"{method} {path} returned {response.status_code}: {message}",
            status_code=response.status_code,
            code=code,
        )

    async def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    # ------------------------
    # Projects
    # ------------------------

    async def fetch_project_status(self, project_id: str) -> ProjectSnapshot:
        payload = await self._call("GET", f"/websites/{project_id}")
        return ProjectSnapshot.from_dict(payload["data"])

    async def save_selection(self, project_id: str, config: PipelineConfig) -> ProjectSnapshot:
        payload = await self._call(
            "POST", f"/websites/{project_id}/selection", json=config.to_dict()
        )
        return ProjectSnapshot.from_dict(payload["data"])

    async def trigger_pipeline_start(self, project_id: str, config: PipelineConfig) -> None:
        # The server builds the worker payload from the stored selection
        await self._call("POST", f"/websites/{project_id}/start-pipeline")

    async def fetch_template(self, template_id: str) -> Optional[TemplateSnapshot]:
        try:
            payload = await self._call("GET", f"/templates/{template_id}")
        except RemoteError as exc:
            if exc.status_code == 404:
                return None
            raise
        return TemplateSnapshot.from_dict(payload["data"])

    # ------------------------
    # Pages
    # ------------------------

    async def list_versions(self, project_id: str, path: str) -> List[PageVersion]:
        payload = await self._call(
            "GET", f"/websites/{project_id}/pages", params={"path": path}
        )
        return [PageVersion.from_dict(v) for v in payload["versions"]]

    async def fetch_page(self, page_id: str) -> PageVersion:
        payload = await self._call("GET", f"/pages/{page_id}")
        return PageVersion.from_dict(payload["data"])

    async def create_page(self, project_id: str, path: str, sections: List[Section]) -> PageVersion:
        payload = await self._call(
            "POST",
            f"/websites/{project_id}/pages",
            json={"path": path, "sections": [s.to_dict() for s in sections]},
        )
        return PageVersion.from_dict(payload["data"])

    async def create_draft(self, page_id: str) -> PageVersion:
        payload = await self._call("POST", f"/pages/{page_id}/draft")
        return PageVersion.from_dict(payload["data"])

    async def save_draft(
        self,
        page_id: str,
        sections: List[Section],
        chat_history: Optional[Dict[str, Any]] = None,
        if_unmodified_since: Optional[str] = None,
    ) -> PageVersion:
        body: Dict[str, Any] = {"sections": [s.to_dict() for s in sections]}
        if chat_history is not None:
            body["edit_chat_history"] = chat_history

        headers = {}
        if if_unmodified_since:
            headers["If-Unmodified-Since"] = if_unmodified_since

        payload = await self._call("PUT", f"/pages/{page_id}", json=body, headers=headers)
        return PageVersion.from_dict(payload["data"])

    async def publish(self, page_id: str) -> PageVersion:
        payload = await self._call("POST", f"/pages/{page_id}/publish")
        return PageVersion.from_dict(payload["data"])

    async def delete_version(self, page_id: str) -> None:
        await self._call("DELETE", f"/pages/{page_id}")

    async def delete_all_versions(self, project_id: str, path: str) -> int:
        payload = await self._call(
            "DELETE", f"/websites/{project_id}/pages", params={"path": path}
        )
        return payload.get("deleted", 0)

    async def restore_version(self, page_id: str) -> PageVersion:
        payload = await self._call("POST", f"/pages/{page_id}/restore")
        return PageVersion.from_dict(payload["data"])

    async def edit_element(self, page_id: str, request: EditRequest) -> EditResult:
        payload = await self._call("POST", f"/pages/{page_id}/edit", json=request.to_dict())
        return EditResult.from_dict(payload)

    # ------------------------
    # Skills
    # ------------------------

    async def fetch_skill_status(self, skill_id: str) -> SkillSnapshot:
        payload = await self._call("GET", f"/skills/{skill_id}")
        return SkillSnapshot.from_dict(payload["data"])

    async def start_skill_generation(self, skill_id: str) -> SkillSnapshot:
        payload = await self._call("POST", f"/skills/{skill_id}/generate")
        return SkillSnapshot.from_dict(payload["data"])
