"""Mercurial pushlog (json-pushes) provider."""

import httpx

from pushgraph.errors import PushLogError
from pushgraph.models import Changeset, Push
from pushgraph.providers.base import PushLog


class HgPushLog(PushLog):
    def __init__(self, timeout: float = 30) -> None:
        self._timeout = timeout

    def _get(self, url: str, params: dict | None = None) -> dict:
        try:
            response = httpx.get(url, params=params or {}, timeout=self._timeout)
            if response.status_code == 404:
                raise PushLogError(f"No pushlog at {url}")
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise PushLogError(f"Could not fetch pushlog at {url}: {exc}") from exc

    def _push_from_node(self, push_id: int, node: dict) -> Push:
        return Push(
            id=push_id,
            user=node["user"],
            date=node["date"],
            changesets=[Changeset(node=c["node"], desc=c.get("desc", "")) for c in node.get("changesets", [])],
        )

    def get_one(self, repo_url: str, push_id: int | str) -> Push:
        try:
            numeric_id = int(push_id)
        except ValueError as exc:
            raise PushLogError(f"Invalid push id {push_id!r}: json-pushes ids are integers") from exc

        url = f"{repo_url.rstrip('/')}/json-pushes"
        data = self._get(
            url,
            # startID is exclusive
            params={"version": "2", "full": "1", "startID": str(numeric_id - 1), "endID": str(numeric_id)},
        )
        node = data.get("pushes", {}).get(str(numeric_id))
        if not node:
            raise PushLogError(f"Push {push_id} not found in {repo_url}")
        if not node.get("changesets"):
            raise PushLogError(f"Push {push_id} in {repo_url} has no changesets")
        return self._push_from_node(numeric_id, node)
