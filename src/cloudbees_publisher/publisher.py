"""
CloudBees WAR publisher.

Runs one deployment attempt after a build: resolve the account, find the war
artifact, upload it through the remote client and turn whatever happens into
a DeploymentOutcome. Status lines go to the build log, not to the process
logger, so the person reading the build sees why a deployment did not happen.
"""
import logging
import sys
from typing import Optional, TextIO

from .accounts import AccountRegistry
from .artifacts import ArtifactGroups, find_deployable_artifact
from .bees_client import ProgressCallback, RemoteDeployClient
from .models import DeploymentOutcome, DeploymentSettings, DeploymentStatus

logger = logging.getLogger(__name__)

DISPLAY_NAME = "CloudBees Deployment"
DEFAULT_ENVIRONMENT = "environnement"
DEFAULT_DESCRIPTION = "description"


class BuildLog:
    """Line-oriented build log"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def println(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


class WarPublisher:
    """Deploys the war artifact of a build to a CloudBees application"""

    def __init__(self, registry: AccountRegistry, client: RemoteDeployClient,
                 environment: str = DEFAULT_ENVIRONMENT,
                 description: str = DEFAULT_DESCRIPTION):
        self.registry = registry
        self.client = client
        self.environment = environment
        self.description = description

    def deploy(self, settings: DeploymentSettings, artifacts: ArtifactGroups,
               build_log: BuildLog,
               on_progress: Optional[ProgressCallback] = None) -> DeploymentOutcome:
        """
        Deploy the build's war artifact

        Args:
            settings: Job settings (account name may be None for the default account)
            artifacts: Artifact record groups recorded by the build
            build_log: Sink for human-readable status lines
            on_progress: Optional callback receiving (delta, written, expected) bytes

        Returns:
            DeploymentOutcome; remote failures are reported, never raised
        """
        account = self.registry.lookup(settings.account_name)
        if account is None:
            message = f"no matching account for '{settings.account_name}'"
            build_log.println(f"CloudBees deployment failed: {message}")
            logger.warning(f"Deployment of {settings.application_id} aborted: {message}")
            return DeploymentOutcome(DeploymentStatus.CONFIGURATION_ERROR, message)

        build_log.println(f"CloudbeesPublisher :: perform {account.name}::{settings.application_id}")

        if not artifacts:
            build_log.println(" no artifacts have been saved, are you sure your build produced some ?")
            return DeploymentOutcome(
                DeploymentStatus.NO_ARTIFACT_FOUND, "no artifacts recorded", account_name=account.name)

        for group in artifacts:
            build_log.println(f"artifacts {[f'{r.type}:{r.file_path}' for r in group]}")

        war_path = find_deployable_artifact(artifacts)
        if war_path is None:
            build_log.println(" no war artifact has been found, are you sure your build produced some ?")
            return DeploymentOutcome(
                DeploymentStatus.NO_ARTIFACT_FOUND, "no war artifact recorded", account_name=account.name)

        build_log.println(f"artifactWithFilePath {war_path}")

        def progress(delta: int, written: int, expected: int) -> None:
            build_log.println(f" deltaCount {delta}, totalWritten {written},{expected}")
            if on_progress is not None:
                on_progress(delta, written, expected)

        try:
            self.client.deploy_war(
                account, settings.application_id, self.environment, self.description,
                war_path, war_path, progress,
            )
        except Exception as e:
            build_log.println(f"issue during deploying war {e}")
            logger.error(f"Deployment of {war_path} to {settings.application_id} failed: {e}")
            return DeploymentOutcome(
                DeploymentStatus.REMOTE_ERROR, str(e),
                account_name=account.name, artifact_path=war_path,
            )

        build_log.println(f"war {war_path} deployed to {settings.application_id}")
        logger.info(f"Deployed {war_path} to {settings.application_id} as {account.name}")
        return DeploymentOutcome(
            DeploymentStatus.SUCCESS, account_name=account.name, artifact_path=war_path)
