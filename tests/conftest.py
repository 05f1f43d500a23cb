import re

import aiohttp
import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer
from aioresponses import aioresponses
from yarl import URL

from portfolio_api import config
from portfolio_api.app import app_factory

GITHUB_API_URL = "https://api.example.com"
GITHUB_USERNAME = "octocat"
ARTIFACT_URL = "https://raw.example.com/octocat/resume/main/resume.pdf"
METADATA_URL = f"{GITHUB_API_URL}/repos/octocat/resume/contents/resume.pdf"
LISTING_PATTERN = re.compile(r"^https://api\.example\.com/users/octocat/repos(\?.*)?$")
PDF_CONTENT = b"%PDF-1.4 fake resume"

METADATA = {
    "name": "resume.pdf",
    "sha": "3d21ec53a331a6f037a91c368710b99387d012c1",
    "size": 52314,
    "download_url": ARTIFACT_URL,
    "commit": {"committer": {"date": "2024-05-01T10:00:00Z"}},
}


def languages_url(owner: str, name: str) -> str:
    return f"{GITHUB_API_URL}/repos/{owner}/{name}/languages"


def listed_repo(name: str, owner: str = GITHUB_USERNAME) -> dict:
    return {
        "name": name,
        "owner": {"login": owner},
        "description": f"The {name} repository",
        "html_url": f"https://github.com/{owner}/{name}",
        "language": "Go",
        "updated_at": "2024-04-01T12:00:00Z",
    }


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(autouse=True)
def setup():
    saved = dict(config.configuration)
    config.override(
        GITHUB_API_URL=GITHUB_API_URL,
        GITHUB_TOKEN="test-token",
        GITHUB_USERNAME=GITHUB_USERNAME,
        ARTIFACT_REPO="octocat/resume",
        ARTIFACT_PATH="resume.pdf",
        ARTIFACT_BRANCH="main",
        ARTIFACT_URL=ARTIFACT_URL,
        ARTIFACT_CACHE_TTL=300,
        WEBHOOK_SECRET="",
        SENTRY_DSN="",
        PROJECT_REPOS={"A": {"order": 1, "owner": "ownerX"}},
        SOFTWARE_REPOS={"B": {"order": 1}},
    )
    yield
    config.configuration.clear()
    config.configuration.update(saved)


@pytest.fixture
def rmock():
    # passthrough for local requests (aiohttp TestServer)
    with aioresponses(passthrough=["http://127.0.0.1"]) as m:
        yield m


@pytest_asyncio.fixture
async def client():
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def fake_client():
    app = await app_factory()
    async with TestClient(TestServer(app)) as client:
        yield client


def mock_metadata(rmock, etag: str | None = '"v1"', payload: dict = METADATA, **kwargs):
    headers = {"ETag": etag} if etag else {}
    rmock.get(METADATA_URL, payload=payload, headers=headers, **kwargs)


def mock_artifact(rmock, **kwargs):
    rmock.get(ARTIFACT_URL, body=PDF_CONTENT, **kwargs)


def calls(rmock, method: str, url: str) -> list:
    return rmock.requests.get((method, URL(url)), [])
