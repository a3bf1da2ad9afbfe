"""Shared fixtures."""

import pytest
import respx


@pytest.fixture
def mock_router():
    """respx router that mocks every httpx request made in the test."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def fake_sleep():
    """Awaitable sleep that records delays instead of waiting."""
    calls = []

    async def sleep(delay):
        calls.append(delay)

    sleep.calls = calls
    return sleep


class FakeResponse:
    def __init__(self, status):
        self.status = status

    @property
    def ok(self):
        return 200 <= self.status < 300


class FakePage:
    def __init__(self, owner):
        self.owner = owner
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.owner.visits.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        if self.owner.failures:
            raise self.owner.failures.pop(0)
        status = self.owner.statuses.pop(0) if self.owner.statuses else 200
        return FakeResponse(status)

    async def content(self):
        return self.owner.pages.get(self.owner.visits[-1]["url"], "<html></html>")

    async def close(self):
        self.closed = True
        self.owner.pages_closed += 1


class FakeContext:
    def __init__(self, owner):
        self.owner = owner

    async def new_page(self):
        return FakePage(self.owner)

    async def add_cookies(self, cookies):
        self.owner.cookies.extend(cookies)


class FakeBrowser:
    def __init__(self, owner):
        self.owner = owner

    async def new_context(self, **kwargs):
        self.owner.context_kwargs = kwargs
        return FakeContext(self.owner)

    async def close(self):
        self.owner.browser_closed += 1


class FakeChromium:
    def __init__(self, owner):
        self.owner = owner

    async def launch(self, headless=True, args=None):
        self.owner.launch_args = args
        if self.owner.launch_error is not None:
            raise self.owner.launch_error
        return FakeBrowser(self.owner)


class FakePlaywright:
    def __init__(self, owner):
        self.chromium = FakeChromium(owner)
        self.owner = owner

    async def stop(self):
        self.owner.playwright_stopped += 1


class FakePlaywrightManager:
    """Stands in for the object returned by async_playwright()."""

    def __init__(self, pages=None, failures=None, statuses=None, launch_error=None):
        self.pages = pages or {}
        self.failures = list(failures or [])
        self.statuses = list(statuses or [])
        self.launch_error = launch_error

        self.visits = []
        self.launch_args = None
        self.context_kwargs = None
        self.cookies = []
        self.pages_closed = 0
        self.browser_closed = 0
        self.playwright_stopped = 0

    def __call__(self):
        return self

    async def start(self):
        return FakePlaywright(self)


@pytest.fixture
def fake_playwright():
    """Factory for Playwright stubs: fake_playwright(pages=..., failures=..., statuses=..., launch_error=...)."""
    return FakePlaywrightManager
