"""
CloudBees API Client
Handles communication with the CloudBees RUN@cloud API
"""
import hashlib
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Callable, Dict, List, Optional

import requests

from .models import Account, ApplicationInfo

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.cloudbees.com/api"
DEFAULT_TIMEOUT = 30
# The platform activates the archive before it answers a deploy
DEFAULT_UPLOAD_TIMEOUT = 300
API_VERSION = "1.0"
UPLOAD_CHUNK_SIZE = 64 * 1024

# (delta_bytes, total_bytes_written, total_bytes_expected)
ProgressCallback = Callable[[int, int, int], None]


class ApiError:
    """Error object returned by the CloudBees API"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code

    def __repr__(self) -> str:
        return f"<ApiError {self.error_code}: {self.message}>"


class BeesClientError(Exception):
    """Exception raised for CloudBees API errors

    `error` is set when the platform replied with a typed error; it is None
    for transport failures and unparseable replies.
    """

    def __init__(self, message: str, error: Optional[ApiError] = None):
        super().__init__(message)
        self.error = error


class RemoteDeployClient(ABC):
    """Operations the publisher needs from the hosting platform"""

    @abstractmethod
    def ping(self, api_key: str, secret_key: str) -> None:
        """Check connectivity and credentials.

        Raises:
            BeesClientError: If the platform cannot be reached or rejects the keys
        """
        pass

    @abstractmethod
    def list_applications(self, account: Account) -> List[ApplicationInfo]:
        """List the applications owned by an account."""
        pass

    @abstractmethod
    def deploy_war(self, account: Account, application_id: str, environment: str,
                   description: str, war_path: str, remote_label: str,
                   progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        """Upload a war file and activate it under an application.

        `progress` is called with (delta, written, expected) byte counts
        while the archive is uploaded.
        """
        pass


def calculate_signature(params: Dict[str, str], secret_key: str) -> str:
    """MD5 signature over the name+value pairs sorted by name, then the secret"""
    payload = "".join(f"{name}{params[name]}" for name in sorted(params))
    return hashlib.md5((payload + secret_key).encode("utf-8")).hexdigest()


class _ProgressReader:
    """File wrapper reporting every chunk read by the HTTP layer"""

    def __init__(self, fileobj: BinaryIO, total: int, progress: Optional[ProgressCallback]):
        self._file = fileobj
        self._total = total
        self._written = 0
        self._progress = progress

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(UPLOAD_CHUNK_SIZE if size is None or size < 0 else size)
        if chunk:
            self._written += len(chunk)
            if self._progress is not None:
                self._progress(len(chunk), self._written, self._total)
        return chunk

    def __len__(self) -> int:
        return self._total


class BeesClient(RemoteDeployClient):
    """Client for interacting with the CloudBees API"""

    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: int = DEFAULT_TIMEOUT,
                 upload_timeout: int = DEFAULT_UPLOAD_TIMEOUT):
        """
        Args:
            api_url: CloudBees API endpoint
            timeout: Connect and read timeout in seconds for API calls
            upload_timeout: Read timeout in seconds while waiting for a deploy reply
        """
        self.api_url = api_url
        self.timeout = timeout
        self.upload_timeout = upload_timeout

    def _signed_params(self, action: str, api_key: str, secret_key: str,
                       extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        params = {
            "action": action,
            "api_key": api_key,
            "format": "json",
            "timestamp": str(int(time.time())),
            "v": API_VERSION,
        }
        if extra:
            params.update(extra)
        params["sig"] = calculate_signature(params, secret_key)
        return params

    def _make_request(self, action: str, api_key: str, secret_key: str,
                      param: Optional[Dict[str, str]] = None,
                      body: Optional[_ProgressReader] = None) -> Dict[str, Any]:
        """Make a signed request to the CloudBees API"""
        params = self._signed_params(action, api_key, secret_key, param)

        try:
            if body is None:
                response = requests.post(self.api_url, data=params, timeout=self.timeout)
            else:
                # Archive is streamed as the body, so the call parameters go in the URL
                response = requests.post(
                    self.api_url,
                    params=params,
                    data=body,
                    headers={"Content-Type": "application/octet-stream"},
                    timeout=(self.timeout, self.upload_timeout),
                )
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise BeesClientError(f"Request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = ApiError(
                message=data["error"].get("message") or "Unknown error",
                error_code=data["error"].get("errorCode"),
            )
            raise BeesClientError(error.message, error=error)

        if not response.ok:
            raise BeesClientError(f"HTTP {response.status_code} from CloudBees API for {action}")

        if not isinstance(data, dict):
            raise BeesClientError(f"Invalid response from CloudBees API for {action}")

        return _unwrap(data)

    def ping(self, api_key: str, secret_key: str) -> None:
        """Call say.hello with the given keys"""
        self._make_request("say.hello", api_key, secret_key, {"message": "hello"})
        logger.info("Successfully reached CloudBees API")

    def list_applications(self, account: Account) -> List[ApplicationInfo]:
        """Get all applications of an account"""
        response = self._make_request(
            "application.list", account.api_key, account.secret_key,
            {"account": account.name},
        )
        applications = response.get("applications") or []
        if isinstance(applications, dict):
            # Single-entry lists may come back unwrapped
            applications = applications.get("application") or []
            if isinstance(applications, dict):
                applications = [applications]

        return [
            ApplicationInfo(id=str(app.get("id", "")), title=str(app.get("title") or ""))
            for app in applications
            if isinstance(app, dict)
        ]

    def deploy_war(self, account: Account, application_id: str, environment: str,
                   description: str, war_path: str, remote_label: str,
                   progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        """Upload a war archive and deploy it to an application"""
        param = {
            "app_id": application_id,
            "environment": environment,
            "description": description,
            "archive_type": "war",
            "archive_name": os.path.basename(remote_label),
        }

        try:
            total = os.path.getsize(war_path)
            war_file = open(war_path, 'rb')
        except OSError as e:
            raise BeesClientError(f"Cannot read archive {war_path}: {e}") from e

        with war_file:
            logger.info(f"Deploying {war_path} ({total} bytes) to {application_id}")
            response = self._make_request(
                "application.deployArchive", account.api_key, account.secret_key,
                param, body=_ProgressReader(war_file, total, progress),
            )

        logger.info(f"Deployed {application_id}: {response}")
        return response


def _unwrap(data: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the single '<Action>Response' wrapper the API puts around results"""
    if len(data) == 1:
        (key, value), = data.items()
        if key.endswith("Response") and isinstance(value, dict):
            return value
    return data
