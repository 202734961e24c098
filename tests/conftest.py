import json
from pathlib import Path
import pytest

from hospitality_sync.config import configure_logging
from hospitality_sync.models import SessionUser
from tests.fake_backend import FakeHospitalityBackend


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session", autouse=True)
def structured_logging():
    """Route structlog through the stdlib handlers so stdout carries only CLI output."""
    configure_logging()


def load_fixture(name: str):
    """Load an API response fixture by file stem."""
    with open(FIXTURES_DIR / "api" / f"{name}.json") as f:
        return json.load(f)


@pytest.fixture
def arrivals_response():
    """Load arrivals response from fixture."""
    return load_fixture("arrivals")


@pytest.fixture
def departures_response():
    """Load departures response from fixture."""
    return load_fixture("departures")


@pytest.fixture
def in_house_response():
    """Load in-house response from fixture."""
    return load_fixture("in_house")


@pytest.fixture
def room_availability_response():
    """Load room availability response from fixture."""
    return load_fixture("room_availability")


@pytest.fixture
def tasks_response():
    """Load housekeeping tasks response from fixture."""
    return load_fixture("tasks")


@pytest.fixture
def pending_tasks_response():
    """Load pending tasks response from fixture."""
    return load_fixture("pending_tasks")


@pytest.fixture
def room_status_response():
    """Load room status board response from fixture."""
    return load_fixture("room_status")


@pytest.fixture
def housekeeping_stats_response():
    """Load housekeeping stats response from fixture."""
    return load_fixture("housekeeping_stats")


@pytest.fixture
def folio_response():
    """Load folio response from fixture."""
    return load_fixture("folio")


@pytest.fixture
def current_user_response():
    """Load signed-in user response from fixture."""
    return load_fixture("current_user")


@pytest.fixture
def manager_user(current_user_response):
    return SessionUser.model_validate(current_user_response)


@pytest.fixture
def housekeeper_user():
    return SessionUser.model_validate({"id": "u-hk-1", "name": "Bisi Cole", "role": "HOUSEKEEPING"})


@pytest.fixture
def backend():
    """In-memory backend seeded from the API fixtures."""
    return FakeHospitalityBackend.from_fixtures(load_fixture)
