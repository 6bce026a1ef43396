"""Same-process HTTP collaborators using aiohttp — implements AppServicesPort."""

from typing import Any, Dict, Optional

import aiohttp

from brainbot.config import CONFIG


class AppServicesClient:
    """Agent, digest, URL ingestion and chat-session endpoints under one base URL."""

    def __init__(self, base_url: Optional[str] = None):
        self._base_url = (base_url or CONFIG["app_base_url"]).rstrip("/")

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        async with aiohttp.ClientSession() as session:
            async with session.request(method, url, json=json, params=params) as resp:
                if resp.status >= 400:
                    raise RuntimeError(f"{method} {path} returned HTTP {resp.status}")
                if resp.content_type != "application/json":
                    return {}
                data = await resp.json()
        return data if isinstance(data, dict) else {}

    async def ask_agent(self, question: str, session_id: str) -> str:
        data = await self._request(
            "POST", "/api/agent", json={"message": question, "session_id": session_id},
        )
        return data.get("response") or ""

    async def fetch_digest(self, kind: str) -> Dict[str, Any]:
        return await self._request("GET", "/api/digest", params={"type": kind})

    async def process_url(self, url: str) -> Dict[str, Any]:
        return await self._request("POST", "/api/process-url", json={"url": url})

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/api/chat-sessions/{session_id}")
