"""
Locate the deployable web archive among a build's recorded artifacts.
"""
import json
import logging
from typing import Any, List, Optional, Sequence

import yaml

from .models import ArtifactRecord

logger = logging.getLogger(__name__)

WAR_TYPE = "war"

ArtifactGroups = Sequence[Sequence[ArtifactRecord]]


class ArtifactManifestError(Exception):
    """Exception raised for unreadable or malformed artifact manifests"""
    pass


def find_deployable_artifact(groups: ArtifactGroups) -> Optional[str]:
    """
    Return the file path of the war artifact to deploy.

    All groups are scanned in order and the last record of type 'war' wins,
    so a later recording action overrides an earlier one.

    Returns:
        The artifact path, or None when no non-blank war path was recorded
    """
    war_path = None
    for group in groups:
        for record in group:
            if record.type == WAR_TYPE:
                war_path = record.file_path

    if war_path is None or not war_path.strip():
        return None
    return war_path


def load_artifact_groups(path: str) -> List[List[ArtifactRecord]]:
    """
    Read recorded artifact groups from a manifest file.

    The manifest is JSON when the file name ends in '.json' and YAML
    otherwise. It holds a list of groups; each group is either a list of
    {type, filePath} mappings or a mapping with an 'artifacts' list.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ArtifactManifestError(f"Failed to read artifact manifest {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise ArtifactManifestError(f"Invalid artifact manifest {path}: root must be a list of groups")

    groups = [_parse_group(group, path) for group in data]
    logger.debug(f"Loaded {len(groups)} artifact groups from {path}")
    return groups


def _parse_group(group: Any, path: str) -> List[ArtifactRecord]:
    if isinstance(group, dict):
        group = group.get("artifacts", [])
    if not isinstance(group, list):
        raise ArtifactManifestError(f"Invalid artifact group in {path}: {group!r}")

    records = []
    for entry in group:
        if not isinstance(entry, dict):
            raise ArtifactManifestError(f"Invalid artifact record in {path}: {entry!r}")
        records.append(ArtifactRecord.from_dict(entry))
    return records
