"""
Mock CloudBees API Client for Local Testing
Simulates CloudBees API responses with demo applications
"""
import logging
import os
from typing import Any, Dict, List, Optional

from .bees_client import (
    DEFAULT_TIMEOUT,
    DEFAULT_UPLOAD_TIMEOUT,
    ApiError,
    BeesClient,
    BeesClientError,
    ProgressCallback,
    RemoteDeployClient,
)
from .config_defaults import get_bool_setting, get_int_setting, get_setting
from .models import Account, ApplicationInfo

logger = logging.getLogger(__name__)

MOCK_CHUNK_SIZE = 8192


class MockBeesClient(RemoteDeployClient):
    """Mock client for simulating CloudBees API responses in local testing"""

    def __init__(self, applications: Optional[Dict[str, List[ApplicationInfo]]] = None,
                 valid_keys: Optional[Dict[str, str]] = None):
        """
        Args:
            applications: Applications per account name (demo data when None)
            valid_keys: api_key -> secret_key pairs accepted by ping (any non-empty pair when None)
        """
        if applications is None:
            applications = self._demo_applications()
        self.applications = applications
        self.valid_keys = valid_keys
        self.deployments: List[Dict[str, Any]] = []

        logger.info(f"🎭 MockBeesClient initialized with {len(self.applications)} accounts")

    @staticmethod
    def _demo_applications() -> Dict[str, List[ApplicationInfo]]:
        return {
            "acme": [
                ApplicationInfo(id="acme/store", title="Store front"),
                ApplicationInfo(id="acme/store-staging", title="Store front (staging)"),
                ApplicationInfo(id="acme/admin", title="Back office"),
            ],
            "demo": [
                ApplicationInfo(id="demo/hello", title="Hello world"),
            ],
        }

    def ping(self, api_key: str, secret_key: str) -> None:
        """Simulate say.hello"""
        if self.valid_keys is not None and self.valid_keys.get(api_key) != secret_key:
            error = ApiError("Invalid API key or signature", error_code="AuthFailure")
            raise BeesClientError(error.message, error=error)
        logger.info(f"🎭 Mock ping successful for key {api_key[:4]}...")

    def list_applications(self, account: Account) -> List[ApplicationInfo]:
        """Simulate application.list"""
        applications = self.applications.get(account.name, [])
        logger.info(f"🎭 Returning {len(applications)} mock applications for {account.name}")
        return list(applications)

    def deploy_war(self, account: Account, application_id: str, environment: str,
                   description: str, war_path: str, remote_label: str,
                   progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        """Simulate application.deployArchive, reading the archive in chunks"""
        known = [app.id for app in self.applications.get(account.name, [])]
        if application_id not in known:
            error = ApiError(f"Application {application_id} not found", error_code="ApplicationNotFound")
            raise BeesClientError(error.message, error=error)

        try:
            total = os.path.getsize(war_path)
            written = 0
            with open(war_path, 'rb') as f:
                while True:
                    chunk = f.read(MOCK_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if progress is not None:
                        progress(len(chunk), written, total)
        except OSError as e:
            raise BeesClientError(f"Cannot read archive {war_path}: {e}") from e

        self.deployments.append({
            "account": account.name,
            "application_id": application_id,
            "environment": environment,
            "description": description,
            "war_path": war_path,
            "remote_label": remote_label,
        })
        logger.info(f"🎭 Mock deployed {war_path} to {application_id}")
        return {"id": application_id, "url": f"http://{application_id.split('/')[-1]}.cloudbees.net"}


def get_bees_client(api_url: Optional[str] = None, timeout: Optional[int] = None,
                    upload_timeout: Optional[int] = None) -> RemoteDeployClient:
    """
    Factory function to get appropriate CloudBees client based on environment.

    Returns MockBeesClient if MOCK_CLOUDBEES_API=true, otherwise real BeesClient.
    """
    if get_bool_setting('MOCK_CLOUDBEES_API'):
        logger.info("🎭 Using MockBeesClient for local testing")
        return MockBeesClient()

    api_url = api_url or get_setting('CLOUDBEES_API_URL', 'https://api.cloudbees.com/api')
    timeout = timeout or get_int_setting('CLOUDBEES_TIMEOUT', DEFAULT_TIMEOUT)
    upload_timeout = upload_timeout or get_int_setting('CLOUDBEES_UPLOAD_TIMEOUT', DEFAULT_UPLOAD_TIMEOUT)
    logger.info(f"Using real BeesClient against {api_url}")
    return BeesClient(api_url=api_url, timeout=timeout, upload_timeout=upload_timeout)
