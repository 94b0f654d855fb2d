"""Tests for war artifact resolution and manifest loading."""

from __future__ import annotations

import json

import pytest

from cloudbees_publisher.artifacts import (
    ArtifactManifestError,
    find_deployable_artifact,
    load_artifact_groups,
)
from cloudbees_publisher.models import ArtifactRecord


def test_last_war_wins_across_groups():
    groups = [
        [ArtifactRecord("jar", "a")],
        [ArtifactRecord("war", "b"), ArtifactRecord("war", "c")],
    ]
    assert find_deployable_artifact(groups) == "c"


def test_later_group_overrides_earlier_war():
    groups = [
        [ArtifactRecord("war", "first.war")],
        [ArtifactRecord("pom", "pom.xml")],
        [ArtifactRecord("war", "second.war"), ArtifactRecord("jar", "lib.jar")],
    ]
    assert find_deployable_artifact(groups) == "second.war"


def test_no_war_records():
    groups = [[ArtifactRecord("jar", "a.jar")], [ArtifactRecord("ear", "b.ear")]]
    assert find_deployable_artifact(groups) is None


def test_no_groups():
    assert find_deployable_artifact([]) is None
    assert find_deployable_artifact([[], []]) is None


def test_blank_war_path_is_not_found():
    groups = [[ArtifactRecord("war", "real.war"), ArtifactRecord("war", "   ")]]
    assert find_deployable_artifact(groups) is None


def test_type_match_is_exact():
    assert find_deployable_artifact([[ArtifactRecord("WAR", "x.war")]]) is None


def test_load_yaml_manifest(tmp_path):
    path = tmp_path / "artifacts.yaml"
    path.write_text(
        "- - {type: jar, filePath: core.jar}\n"
        "- artifacts:\n"
        "    - {type: war, filePath: web.war}\n"
    )
    groups = load_artifact_groups(str(path))
    assert groups == [
        [ArtifactRecord("jar", "core.jar")],
        [ArtifactRecord("war", "web.war")],
    ]
    assert find_deployable_artifact(groups) == "web.war"


def test_load_json_manifest(tmp_path):
    path = tmp_path / "artifacts.json"
    path.write_text(json.dumps([[{"type": "war", "filePath": "/tmp/x.war"}]]))
    assert load_artifact_groups(str(path)) == [[ArtifactRecord("war", "/tmp/x.war")]]


def test_empty_manifest_has_no_groups(tmp_path):
    path = tmp_path / "artifacts.yaml"
    path.write_text("")
    assert load_artifact_groups(str(path)) == []


@pytest.mark.parametrize("content", ["{type: war}", "- 42", "- [oops]"])
def test_malformed_manifest(tmp_path, content):
    path = tmp_path / "artifacts.yaml"
    path.write_text(content)
    with pytest.raises(ArtifactManifestError):
        load_artifact_groups(str(path))


def test_missing_manifest(tmp_path):
    with pytest.raises(ArtifactManifestError):
        load_artifact_groups(str(tmp_path / "nope.yaml"))
