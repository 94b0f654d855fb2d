"""
Value types shared by the registry, the dispatcher and the UI checks.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, NamedTuple, Optional

if TYPE_CHECKING:
    from .accounts import AccountRegistry

# Form field prefix used by the configuration page for account and job fields
FORM_PREFIX = "cloudbeesaccount."


@dataclass(frozen=True)
class Account:
    """Named CloudBees credentials."""

    name: str
    api_key: str
    secret_key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "apiKey": self.api_key,
            "secretKey": self.secret_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Account":
        return cls(
            name=str(data.get("name") or ""),
            api_key=str(data.get("apiKey") or ""),
            secret_key=str(data.get("secretKey") or ""),
        )

    def __repr__(self) -> str:
        # Never leak keys into logs
        return f"<Account {self.name}>"


@dataclass(frozen=True)
class DeploymentSettings:
    """Per-job publisher settings."""

    account_name: Optional[str]
    application_id: str

    @classmethod
    def bind(cls, registry: "AccountRegistry", account_name: Optional[str],
             application_id: str) -> "DeploymentSettings":
        """Create settings, reverting to the default account when none is given."""
        if account_name is None:
            default = registry.lookup(None)
            if default is not None:
                account_name = default.name
        return cls(account_name=account_name, application_id=application_id)

    @classmethod
    def from_form(cls, form: Mapping[str, Any],
                  registry: "AccountRegistry") -> Optional["DeploymentSettings"]:
        """Bind settings from submitted job configuration.

        Returns None when no account name can be determined, in which case
        the job gets no publisher.
        """
        account_name = form.get(FORM_PREFIX + "accountName") or None
        application_id = form.get(FORM_PREFIX + "applicationId") or ""
        settings = cls.bind(registry, account_name, application_id.strip())
        if settings.account_name is None:
            return None
        return settings

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "accountName": self.account_name,
            "applicationId": self.application_id,
        }


@dataclass(frozen=True)
class ArtifactRecord:
    """One artifact recorded by a build, e.g. type 'war' at some file path."""

    type: str
    file_path: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ArtifactRecord":
        return cls(
            type=str(data.get("type") or ""),
            file_path=str(data.get("filePath") or data.get("file_path") or ""),
        )


@dataclass(frozen=True)
class ApplicationInfo:
    """Application entry as returned by the remote application list."""

    id: str
    title: str = ""


class DeploymentStatus(enum.Enum):
    SUCCESS = "success"
    CONFIGURATION_ERROR = "configuration_error"
    NO_ARTIFACT_FOUND = "no_artifact_found"
    REMOTE_ERROR = "remote_error"


class DeploymentOutcome(NamedTuple):
    """Result of one deployment attempt."""
    status: DeploymentStatus
    message: Optional[str] = None
    account_name: Optional[str] = None
    artifact_path: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is DeploymentStatus.SUCCESS


class FormValidation(NamedTuple):
    """Result of a configuration form check."""
    kind: str
    message: Optional[str] = None

    OK = "ok"
    ERROR = "error"

    @classmethod
    def ok(cls) -> "FormValidation":
        return cls(cls.OK)

    @classmethod
    def error(cls, message: str) -> "FormValidation":
        return cls(cls.ERROR, message)

    @property
    def is_ok(self) -> bool:
        return self.kind == self.OK

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"kind": self.kind, "message": self.message}
