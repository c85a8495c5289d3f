"""Tests for GitHubClient using respx to mock httpx."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
import respx
from httpx import Response

from pkgkeeper.errors import PullRequestAuthError, PullRequestError
from pkgkeeper.github_client import GitHubClient
from pkgkeeper.models import ForkData, NewPullRequest, PackageSources
from pkgkeeper.package_updater import PackageUpdater

API = "https://api.github.com"
FORK = ForkData(url="https://github.com/me/test.git", owner="me", name="test")
REQUEST = NewPullRequest(
    title="Automatic update of foo to 1.3.0",
    head="me:pkgkeeper-update-foo-to-1.3.0",
    base="main",
    body="body",
    labels=("deps",),
)


@pytest_asyncio.fixture
async def client():
    c = GitHubClient(token="tok")
    yield c
    await c.close()


@respx.mock
@pytest.mark.asyncio
async def test_open_pull_request(client):
    created = respx.post(f"{API}/repos/me/test/pulls").mock(
        return_value=Response(201, json={"number": 12, "html_url": "https://github.com/me/test/pull/12"})
    )
    labels = respx.post(f"{API}/repos/me/test/issues/12/labels").mock(return_value=Response(200, json=[]))
    reviewers = respx.post(f"{API}/repos/me/test/pulls/12/requested_reviewers").mock(
        return_value=Response(201, json={})
    )

    pull_request = await client.open_pull_request(FORK, REQUEST, ["alice"])

    assert pull_request.number == 12
    assert pull_request.url == "https://github.com/me/test/pull/12"
    payload = json.loads(created.calls.last.request.content)
    assert payload == {
        "title": "Automatic update of foo to 1.3.0",
        "head": "me:pkgkeeper-update-foo-to-1.3.0",
        "base": "main",
        "body": "body",
    }
    assert created.calls.last.request.headers["Authorization"] == "Bearer tok"
    assert json.loads(labels.calls.last.request.content) == {"labels": ["deps"]}
    assert json.loads(reviewers.calls.last.request.content) == {"reviewers": ["alice"]}


@respx.mock
@pytest.mark.asyncio
async def test_open_pull_request_without_labels_or_reviewers(client):
    respx.post(f"{API}/repos/me/test/pulls").mock(
        return_value=Response(201, json={"number": 3, "html_url": "https://github.com/me/test/pull/3"})
    )
    request = NewPullRequest(title="t", head="me:b", base="main")

    pull_request = await client.open_pull_request(FORK, request, [])

    assert pull_request.number == 3
    assert len(respx.calls) == 1


@respx.mock
@pytest.mark.asyncio
async def test_open_pull_request_validation_error(client):
    respx.post(f"{API}/repos/me/test/pulls").mock(
        return_value=Response(422, json={"message": "A pull request already exists"})
    )

    with pytest.raises(PullRequestError) as exc_info:
        await client.open_pull_request(FORK, REQUEST, [])
    assert exc_info.value.status_code == 422


@respx.mock
@pytest.mark.asyncio
async def test_open_pull_request_auth_error(client):
    respx.post(f"{API}/repos/me/test/pulls").mock(return_value=Response(401, json={"message": "Bad credentials"}))

    with pytest.raises(PullRequestAuthError):
        await client.open_pull_request(FORK, REQUEST, [])


@respx.mock
@pytest.mark.asyncio
async def test_branch_exists(client):
    respx.get(f"{API}/repos/me/test/branches/pkgkeeper-update-foo-to-1.3.0").mock(
        return_value=Response(200, json={"name": "pkgkeeper-update-foo-to-1.3.0"})
    )
    respx.get(f"{API}/repos/me/test/branches/missing").mock(return_value=Response(404))

    assert await client.branch_exists(FORK, "pkgkeeper-update-foo-to-1.3.0") is True
    assert await client.branch_exists(FORK, "missing") is False


@respx.mock
@pytest.mark.asyncio
async def test_branch_exists_server_error(client):
    respx.get(f"{API}/repos/me/test/branches/main").mock(return_value=Response(500))

    with pytest.raises(PullRequestError):
        await client.branch_exists(FORK, "main")


@respx.mock
@pytest.mark.asyncio
async def test_label_and_reviewer_failures_keep_pull_request(client):
    respx.post(f"{API}/repos/me/test/pulls").mock(
        return_value=Response(201, json={"number": 7, "html_url": "https://github.com/me/test/pull/7"})
    )
    respx.post(f"{API}/repos/me/test/issues/7/labels").mock(
        return_value=Response(422, json={"message": "Validation Failed"})
    )
    respx.post(f"{API}/repos/me/test/pulls/7/requested_reviewers").mock(
        return_value=Response(422, json={"message": "Review cannot be requested from pull request author."})
    )

    pull_request = await client.open_pull_request(FORK, REQUEST, ["me"])

    assert pull_request.number == 7
    assert len(respx.calls) == 3


@respx.mock
@pytest.mark.asyncio
async def test_reviewer_failure_still_counts_update(client, make_update_set, repository_data, make_settings):
    respx.post(f"{API}/repos/me/test/pulls").mock(
        return_value=Response(201, json={"number": 8, "html_url": "https://github.com/me/test/pull/8"})
    )
    respx.post(f"{API}/repos/me/test/issues/8/labels").mock(return_value=Response(200, json=[]))
    respx.post(f"{API}/repos/me/test/pulls/8/requested_reviewers").mock(
        return_value=Response(422, json={"message": "Review cannot be requested from pull request author."})
    )
    git = MagicMock()
    git.working_folder = Path("/repo")
    git.get_current_head.return_value = "main"
    updater = PackageUpdater(client, MagicMock())

    count = await updater.make_update_pull_requests(
        git, repository_data, [make_update_set()], PackageSources.default(), make_settings()
    )

    assert count == 1
    git.commit.assert_called_once()
    git.discard_changes.assert_not_called()
