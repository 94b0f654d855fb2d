"""
Checks behind the configuration form.

Every check returns a FormValidation; nothing here raises to the caller
except autocomplete, whose remote failures are left to the HTTP adapter.
"""
import logging
from typing import List, Optional

from .accounts import AccountRegistry
from .bees_client import BeesClientError, RemoteDeployClient
from .models import FormValidation

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error check server logs"


class AccountNotFoundError(LookupError):
    """Raised when a check refers to an account that is not configured"""
    pass


class ValidationService:
    """Form checks and application-id autocompletion"""

    def __init__(self, registry: AccountRegistry, client: RemoteDeployClient):
        self.registry = registry
        self.client = client

    @staticmethod
    def check_non_empty(value: Optional[str], name: str) -> FormValidation:
        if value is None or not value.strip():
            return FormValidation.error(f"{name} cannot be empty")
        return FormValidation.ok()

    def check_name(self, name: Optional[str]) -> FormValidation:
        return self.check_non_empty(name, "name")

    def check_api_key(self, api_key: Optional[str]) -> FormValidation:
        return self.check_non_empty(api_key, "apiKey")

    def check_connectivity(self, api_key: Optional[str], secret_key: Optional[str]) -> FormValidation:
        """
        Verify a key pair against the platform

        Both keys must be present (secretKey is checked first); then the
        platform is pinged. A typed platform error is shown as-is, anything
        else is logged and reported generically.
        """
        for value, name in ((secret_key, "secretKey"), (api_key, "apiKey")):
            result = self.check_non_empty(value, name)
            if not result.is_ok:
                return result

        try:
            self.client.ping(api_key, secret_key)
        except BeesClientError as e:
            if e.error is None:
                logger.error("Error during calling cloudbees api", exc_info=True)
                return FormValidation.error(UNKNOWN_ERROR_MESSAGE)
            return FormValidation.error(e.error.message)
        except Exception:
            logger.error("Error during calling cloudbees api", exc_info=True)
            return FormValidation.error(UNKNOWN_ERROR_MESSAGE)
        return FormValidation.ok()

    def check_application_id(self, application_id: Optional[str],
                             account_name: Optional[str]) -> FormValidation:
        """
        Verify that an application exists for the account

        On a miss the error lists every known application id as a hint.
        """
        result = self.check_non_empty(application_id, "applicationId")
        if not result.is_ok:
            return result

        try:
            application_ids = self._application_ids(account_name)
        except Exception as e:
            logger.warning(f"Application id check failed for {application_id}: {e}")
            return FormValidation.error(f"error during check applicationId {e}")

        if application_id in application_ids:
            return FormValidation.ok()
        return FormValidation.error(f"possible applicationIds are {' '.join(application_ids)}")

    def autocomplete(self, partial: Optional[str], account_name: Optional[str]) -> List[str]:
        """Application ids starting with `partial`, in the order the platform lists them

        A None prefix matches no id, an empty string matches every id.
        """
        if partial is None:
            return []

        try:
            application_ids = self._application_ids(account_name)
        except AccountNotFoundError as e:
            logger.warning(f"No autocompletion: {e}")
            return []

        candidates = [app_id for app_id in application_ids if app_id.startswith(partial)]
        logger.debug(f"found {len(candidates)} candidates for '{partial}'")
        return candidates

    def _application_ids(self, account_name: Optional[str]) -> List[str]:
        account = self.registry.lookup(account_name)
        if account is None:
            raise AccountNotFoundError(f"no CloudBees account named '{account_name}'")
        return [app.id for app in self.client.list_applications(account)]
