# Armory Live-Server Test Suite - Shared Configuration and Fixtures
#
# This module provides:
# - Test database provisioning (ephemeral SQLite per test run)
# - Server lifecycle (flask run against that database)
# - Seed data via the `flask system` CLI
# - Authentication helpers
# - Failure message formatting

import os
import sys
import time
import tempfile
import subprocess
import shutil
from pathlib import Path
from typing import Generator, Optional, Dict, Any, List
from dataclasses import dataclass

import pytest
import httpx

REPO_ROOT = Path(__file__).parent.parent
BACKEND_DIR = REPO_ROOT / "backend"

# Credentials created by `flask system seed`
SEED_CREDENTIALS = {
    "admin": ("admin@military.gov", "admin123"),
    "commander": ("commander@fortbragg.mil", "commander123"),
    "logistics": ("logistics@pendleton.mil", "logistics123"),
}


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class LiveTestConfig:
    """Test configuration with environment variable overrides."""
    backend_base_url: str = os.environ.get("TEST_BACKEND_URL", "http://127.0.0.1:5001")

    # Timeouts
    request_timeout: float = float(os.environ.get("TEST_REQUEST_TIMEOUT", "30"))
    server_startup_timeout: float = float(os.environ.get("TEST_SERVER_STARTUP_TIMEOUT", "30"))

    # Random seed passed to `flask system seed`
    seed: int = int(os.environ.get("TEST_SEED", "42"))


# =============================================================================
# FAILURE MESSAGE HELPER
# =============================================================================

class LiveTestFailure(Exception):
    """
    Exception with a readable failure report.

    Structure:
    1. Scenario: What was being tested
    2. Expected: What should have happened
    3. Actual: What actually happened
    4. Likely Cause: Most probable reason for failure
    5. Code Location: Where to look in the codebase
    """

    def __init__(
        self,
        scenario: str,
        expected: str,
        actual: str,
        likely_cause: str,
        code_location: str,
        response: Optional[httpx.Response] = None,
    ):
        self.scenario = scenario
        self.expected = expected
        self.actual = actual
        self.likely_cause = likely_cause
        self.code_location = code_location
        self.response = response
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [
            "",
            "=" * 80,
            "TEST FAILURE DETAILS",
            "=" * 80,
            f"SCENARIO: {self.scenario}",
            "-" * 80,
            f"EXPECTED: {self.expected}",
            f"ACTUAL: {self.actual}",
            "-" * 80,
            f"LIKELY CAUSE: {self.likely_cause}",
            f"CODE LOCATION: {self.code_location}",
        ]

        if self.response is not None:
            lines.extend([
                "-" * 80,
                f"HTTP STATUS: {self.response.status_code}",
                f"RESPONSE BODY: {self.response.text[:1000]}",
            ])

        lines.append("=" * 80)
        return "\n".join(lines)


def assert_response(
    response: httpx.Response,
    expected_status: int,
    scenario: str,
    code_location: str,
    expected_body_contains: Optional[str] = None
):
    """
    Assert HTTP response status and optionally body content.
    Raises LiveTestFailure with a detailed message on failure.
    """
    if response.status_code != expected_status:
        raise LiveTestFailure(
            scenario=scenario,
            expected=f"HTTP {expected_status}",
            actual=f"HTTP {response.status_code}",
            likely_cause=_infer_cause(response),
            code_location=code_location,
            response=response
        )

    if expected_body_contains and expected_body_contains not in response.text:
        raise LiveTestFailure(
            scenario=scenario,
            expected=f"Response body contains: {expected_body_contains}",
            actual=f"Response body: {response.text[:500]}",
            likely_cause="Response format changed or wrong endpoint hit",
            code_location=code_location,
            response=response
        )


def _infer_cause(response: httpx.Response) -> str:
    if response.status_code == 401:
        return "Authentication failed - bearer token missing"
    elif response.status_code == 403:
        return "Token invalid/expired, role lacks the permission, or base scope violated"
    elif response.status_code == 404:
        return "Resource not found - wrong ID"
    elif response.status_code == 400:
        return "Invalid request - missing required field or validation failed"
    elif response.status_code == 409:
        return "Conflict - transfer/assignment not in a state that allows this change"
    elif response.status_code == 500:
        return "Server error - check backend logs for stack trace"
    else:
        return f"Unexpected status code {response.status_code}"


# =============================================================================
# HTTP CLIENT WITH AUTH HELPERS
# =============================================================================

class APIClient:
    """HTTP client wrapper with bearer-token authentication."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout)
        self.token: Optional[str] = None
        self.current_user: Optional[Dict] = None

    def _headers(self) -> Dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get(self, path: str, params: Optional[Dict] = None) -> httpx.Response:
        return self.client.get(f"{self.base_url}{path}", headers=self._headers(), params=params)

    def post(self, path: str, json: Optional[Dict] = None) -> httpx.Response:
        return self.client.post(f"{self.base_url}{path}", headers=self._headers(), json=json)

    def put(self, path: str, json: Optional[Dict] = None) -> httpx.Response:
        return self.client.put(f"{self.base_url}{path}", headers=self._headers(), json=json)

    def patch(self, path: str, json: Optional[Dict] = None) -> httpx.Response:
        return self.client.patch(f"{self.base_url}{path}", headers=self._headers(), json=json)

    def login(self, email: str, password: str) -> bool:
        """Authenticate and store token."""
        response = self.post("/api/auth/login", json={"email": email, "password": password})
        if response.status_code == 200:
            data = response.json()
            self.token = data.get("token")
            self.current_user = data.get("user")
            return True
        return False

    def logout(self) -> bool:
        if not self.token:
            return True
        response = self.post("/api/auth/logout")
        if response.status_code == 200:
            self.token = None
            self.current_user = None
            return True
        return False

    def close(self):
        self.client.close()


# =============================================================================
# SERVER MANAGEMENT
# =============================================================================

class ServerManager:
    """Manages the Flask backend server lifecycle for tests."""

    def __init__(self, config: LiveTestConfig):
        self.config = config
        self.process: Optional[subprocess.Popen] = None
        self.db_file: Optional[Path] = None

    def _env(self) -> Dict[str, str]:
        env = os.environ.copy()
        env["DATABASE_URL"] = f"sqlite:///{self.db_file}"
        env["FLASK_APP"] = "wsgi"
        env["STOCK_MISSING_ROW_POLICY"] = "create"
        return env

    def _flask(self, *args: str) -> None:
        subprocess.run(
            [sys.executable, "-m", "flask", *args],
            cwd=str(BACKEND_DIR),
            env=self._env(),
            check=True,
            capture_output=True,
        )

    def start(self) -> bool:
        """Create and seed a temp database, then start the server on it."""
        temp_dir = tempfile.mkdtemp(prefix="armory_test_")
        self.db_file = Path(temp_dir) / "test_armory.sqlite3"

        self._flask("system", "init")
        self._flask("system", "seed", "--seed", str(self.config.seed), "--yes")

        port = self.config.backend_base_url.rsplit(":", 1)[-1].split("/")[0]
        self.process = subprocess.Popen(
            [sys.executable, "-m", "flask", "run", "--port", port],
            cwd=str(BACKEND_DIR),
            env=self._env(),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        return self._wait_for_server()

    def _wait_for_server(self) -> bool:
        start_time = time.time()
        while time.time() - start_time < self.config.server_startup_timeout:
            try:
                response = httpx.get(f"{self.config.backend_base_url}/health", timeout=2.0)
                if response.status_code in (200, 503):  # 503 means unhealthy but running
                    return True
            except (httpx.ConnectError, httpx.TimeoutException):
                pass
            time.sleep(0.5)
        return False

    def stop(self):
        """Stop the Flask server and clean up."""
        if self.process:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
            self.process = None

        if self.db_file and self.db_file.parent.exists():
            shutil.rmtree(self.db_file.parent, ignore_errors=True)


# =============================================================================
# TEST DATA HELPERS
# =============================================================================

class ArmoryData:
    """Looks up seeded reference data and creates records via the API."""

    def __init__(self, client: APIClient):
        self.client = client

    def bases(self) -> List[Dict]:
        response = self.client.get("/api/bases")
        assert_response(response, 200, "List bases", "backend/armory/routes/bases.py")
        return response.json()

    def assets(self) -> List[Dict]:
        response = self.client.get("/api/assets")
        assert_response(response, 200, "List assets", "backend/armory/routes/assets.py")
        return response.json()

    def stock(self, base_id: int, asset_id: int) -> Optional[Dict]:
        response = self.client.get("/api/stocks", params={"baseId": base_id})
        assert_response(response, 200, "List stocks", "backend/armory/routes/stocks.py")
        for row in response.json():
            if row["assetId"] == asset_id:
                return row
        return None

    def purchase(self, base_id: int, asset_id: int, quantity: int) -> Dict[str, Any]:
        response = self.client.post("/api/purchases", json={
            "assetId": asset_id,
            "baseId": base_id,
            "quantity": quantity,
            "purchaseDate": "2024-06-01T00:00:00Z",
        })
        assert_response(
            response, 201, "Record purchase",
            "backend/armory/routes/purchases.py:create_purchase_route",
        )
        return response.json()

    def transfer(self, from_base_id: int, to_base_id: int, asset_id: int, quantity: int) -> Dict[str, Any]:
        response = self.client.post("/api/transfers", json={
            "assetId": asset_id,
            "fromBaseId": from_base_id,
            "toBaseId": to_base_id,
            "quantity": quantity,
            "transferDate": "2024-06-02T00:00:00Z",
        })
        assert_response(
            response, 201, "Create transfer",
            "backend/armory/routes/transfers.py:create_transfer_route",
        )
        return response.json()


# =============================================================================
# PYTEST FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def live_config() -> LiveTestConfig:
    return LiveTestConfig()


@pytest.fixture(scope="session")
def server_manager(live_config: LiveTestConfig) -> Generator[ServerManager, None, None]:
    """
    Manage test server lifecycle.
    Server is started once per test session.
    """
    manager = ServerManager(live_config)

    # For CI/external server mode, don't manage server
    if os.environ.get("TEST_EXTERNAL_SERVER"):
        yield manager
    else:
        if not manager.start():
            pytest.fail("Failed to start test server")
        yield manager
        manager.stop()


@pytest.fixture(scope="session")
def api_client(live_config: LiveTestConfig, server_manager: ServerManager) -> Generator[APIClient, None, None]:
    client = APIClient(live_config.backend_base_url, timeout=live_config.request_timeout)
    yield client
    client.close()


@pytest.fixture
def client(api_client: APIClient) -> APIClient:
    """API client with any previous auth state cleared."""
    api_client.token = None
    api_client.current_user = None
    return api_client


def _login_as(client: APIClient, role: str) -> APIClient:
    email, password = SEED_CREDENTIALS[role]
    if not client.login(email, password):
        pytest.fail(f"Failed to login as {email}")
    return client


@pytest.fixture
def admin_client(client: APIClient) -> APIClient:
    return _login_as(client, "admin")


@pytest.fixture
def commander_client(live_config: LiveTestConfig, server_manager) -> Generator[APIClient, None, None]:
    """Separate connection so tests can act as two users at once."""
    c = APIClient(live_config.backend_base_url, timeout=live_config.request_timeout)
    yield _login_as(c, "commander")
    c.close()


@pytest.fixture
def logistics_client(live_config: LiveTestConfig, server_manager) -> Generator[APIClient, None, None]:
    c = APIClient(live_config.backend_base_url, timeout=live_config.request_timeout)
    yield _login_as(c, "logistics")
    c.close()


@pytest.fixture
def data(admin_client: APIClient) -> ArmoryData:
    return ArmoryData(admin_client)


# =============================================================================
# TEST MARKERS
# =============================================================================

def pytest_configure(config):
    config.addinivalue_line("markers", "smoke: Quick smoke tests for critical paths")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "rbac: Role-based access control tests")
    config.addinivalue_line("markers", "purchases: Purchase tests")
    config.addinivalue_line("markers", "transfers: Inter-base transfer tests")
    config.addinivalue_line("markers", "assignments: Assignment tests")
    config.addinivalue_line("markers", "dashboard: Dashboard metrics tests")
