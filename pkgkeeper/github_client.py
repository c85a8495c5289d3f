"""Async GitHub REST API client for pull requests, using httpx."""

import logging
from typing import Any, Sequence

import httpx

from .errors import PullRequestAuthError, PullRequestError
from .models import ForkData, NewPullRequest, PullRequest
from .settings import GITHUB_API_URL

logger = logging.getLogger(__name__)


class GitHubClient:
    """Open pull requests and query branches on GitHub."""

    def __init__(self, token: str | None, api_url: str = GITHUB_API_URL, timeout: int = 30):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise PullRequestError(f"GitHub API {method} {path} failed: {e}") from e

        if response.status_code == 401:
            raise PullRequestAuthError()
        return response

    async def _post(self, path: str, json: Any) -> Any:
        response = await self._request("POST", path, json=json)
        if response.status_code >= 400:
            raise PullRequestError(
                f"GitHub API POST {path} failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    async def open_pull_request(
        self,
        target: ForkData,
        request: NewPullRequest,
        reviewers: Sequence[str],
    ) -> PullRequest:
        """Open a pull request on ``target``, then label it and request reviews."""
        repo_path = f"/repos/{target.owner}/{target.name}"
        created = await self._post(
            f"{repo_path}/pulls",
            json={
                "title": request.title,
                "head": request.head,
                "base": request.base,
                "body": request.body,
            },
        )
        pull_request = PullRequest(number=created["number"], url=created["html_url"])
        logger.debug("Created pull request #%d on %s/%s", pull_request.number, target.owner, target.name)

        if request.labels:
            try:
                await self._post(
                    f"{repo_path}/issues/{pull_request.number}/labels",
                    json={"labels": list(request.labels)},
                )
            except PullRequestError as e:
                logger.warning("Could not label pull request #%d: %s", pull_request.number, e)

        if reviewers:
            try:
                await self._post(
                    f"{repo_path}/pulls/{pull_request.number}/requested_reviewers",
                    json={"reviewers": list(reviewers)},
                )
            except PullRequestError as e:
                logger.warning(
                    "Could not request reviewers for pull request #%d: %s", pull_request.number, e
                )

        return pull_request

    async def branch_exists(self, fork: ForkData, branch_name: str) -> bool:
        path = f"/repos/{fork.owner}/{fork.name}/branches/{branch_name}"
        response = await self._request("GET", path)
        if response.status_code == 404:
            return False
        if response.status_code >= 400:
            raise PullRequestError(
                f"GitHub API GET {path} failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )
        return True
