"""
CloudBees WAR publisher.

Deploys the war artifact of a finished build to a CloudBees application.
"""
from .accounts import AccountRegistry, AccountStore, AccountStoreError
from .artifacts import find_deployable_artifact, load_artifact_groups
from .bees_client import BeesClient, BeesClientError, RemoteDeployClient
from .models import (
    Account,
    ApplicationInfo,
    ArtifactRecord,
    DeploymentOutcome,
    DeploymentSettings,
    DeploymentStatus,
    FormValidation,
)
from .publisher import BuildLog, WarPublisher
from .validation import ValidationService

__version__ = "1.0.0"

__all__ = [
    'Account',
    'AccountRegistry',
    'AccountStore',
    'AccountStoreError',
    'ApplicationInfo',
    'ArtifactRecord',
    'BeesClient',
    'BeesClientError',
    'BuildLog',
    'DeploymentOutcome',
    'DeploymentSettings',
    'DeploymentStatus',
    'FormValidation',
    'RemoteDeployClient',
    'ValidationService',
    'WarPublisher',
    'find_deployable_artifact',
    'load_artifact_groups',
]
