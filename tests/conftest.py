"""Shared fixtures for the publisher tests."""

from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from cloudbees_publisher.accounts import AccountRegistry
from cloudbees_publisher.bees_client import RemoteDeployClient
from cloudbees_publisher.models import Account, ApplicationInfo


class RecordingClient(RemoteDeployClient):
    """Remote client fake that records calls and replays canned behaviour."""

    def __init__(self, applications=None, deploy_error=None, ping_error=None, progress_events=()):
        self.applications = applications or []
        self.deploy_error = deploy_error
        self.ping_error = ping_error
        self.progress_events = list(progress_events)
        self.deploy_calls: list[dict] = []
        self.ping_calls: list[tuple[str, str]] = []
        self.list_calls: list[str] = []

    def ping(self, api_key, secret_key):
        self.ping_calls.append((api_key, secret_key))
        if self.ping_error is not None:
            raise self.ping_error

    def list_applications(self, account):
        self.list_calls.append(account.name)
        if isinstance(self.applications, Exception):
            raise self.applications
        return [ApplicationInfo(id=app_id) for app_id in self.applications]

    def deploy_war(self, account, application_id, environment, description,
                   war_path, remote_label, progress=None):
        self.deploy_calls.append({
            "account": account.name,
            "application_id": application_id,
            "environment": environment,
            "description": description,
            "war_path": war_path,
            "remote_label": remote_label,
        })
        for event in self.progress_events:
            progress(*event)
        if self.deploy_error is not None:
            raise self.deploy_error
        return {"id": application_id}


@pytest.fixture
def acme() -> Account:
    return Account(name="acme", api_key="acme-key", secret_key="acme-secret")


@pytest.fixture
def registry(acme) -> AccountRegistry:
    return AccountRegistry([acme])


@pytest.fixture(autouse=True)
def _no_mock_env(monkeypatch):
    monkeypatch.delenv("MOCK_CLOUDBEES_API", raising=False)
