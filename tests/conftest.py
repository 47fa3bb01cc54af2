"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from api.app import create_app
from config import Config, GeneratorConfig, LoggingConfig
from idgen import BitLayout, IdGenerator

EPOCH = 1_600_000_000_000
START = EPOCH + 1_000


class FakeClock:
    """Millisecond clock that only moves when told to.

    With ``hold`` set, it advances by one millisecond after every ``hold``
    reads, so a generator spinning for the next millisecond gets out.
    """

    def __init__(self, now=START, hold=None):
        self.now = now
        self.hold = hold
        self.reads = 0

    def __call__(self):
        self.reads += 1
        if self.hold is not None and self.reads > self.hold:
            self.now += 1
            self.reads = 0
        return self.now

    def advance(self, ms=1):
        self.now += ms

    def set(self, now):
        self.now = now


@pytest.fixture
def clock():
    """Create a frozen test clock."""
    return FakeClock()


@pytest.fixture
def layout():
    """Create the canonical 41/5/5/12 layout."""
    return BitLayout()


@pytest.fixture
def generator(clock, layout):
    """Create a test generator on a frozen clock."""
    return IdGenerator(datacenter_id=3, worker_id=7, epoch=EPOCH, layout=layout, clock=clock)


@pytest.fixture
def app_config():
    """Create test service config."""
    return Config(
        generator=GeneratorConfig(epoch=EPOCH, datacenter_id=2, worker_id=5),
        logging=LoggingConfig(level="ERROR"),
    )


@pytest.fixture
async def app(app_config, clock):
    """Create test FastAPI app."""
    return create_app(app_config, clock=clock)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
