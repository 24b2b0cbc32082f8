"""Tests for gsprovider.hcl rendering and interpolation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

import gsprovider.hcl as hcl
from gsprovider.projects import Project
from gsprovider.resources import K8sResource, TemplateResource
from gsprovider.workspace import Workspace


class ClusterProject(Project):
    datacenter: str = ""


def _write_hcl(tmp_path: Path, filename: str, content: str) -> Path:
    f = tmp_path / filename
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content)
    return f


def _specs(project: Project) -> list:
    return [op.spec for bp in project.blueprints for op in bp]


class TestLoad:
    def test_resource_block_structure(self, tmp_path):
        f = _write_hcl(
            tmp_path,
            "k8s.hcl",
            """
            blueprint "k8s" {
                ensure "gridscale_k8s" {
                    name = "cluster"
                    k8s_release = "1.30"
                    worker_node_count = 3
                }
            }
        """,
        )
        data = hcl.load(f)
        [block] = data["blueprint"]
        [ensure] = block["k8s"]["ensure"]
        assert ensure["gridscale_k8s"]["k8s_release"] == "1.30"
        assert ensure["gridscale_k8s"]["worker_node_count"] == 3

    def test_context_selects_release(self, tmp_path):
        f = _write_hcl(
            tmp_path,
            "k8s.hcl",
            """
            project "prod" {
                ensure "gridscale_k8s" {
                    name = "{{ prefix }}-cluster"
                    k8s_release = "{{ release }}"
                }
            }
        """,
        )
        ws = Workspace(context={"prefix": "prod", "release": "1.29"})
        ws.load(f)
        [spec] = _specs(ws["prod"])
        assert isinstance(spec, K8sResource)
        assert spec.attrs.name == "prod-cluster"
        assert spec.attrs.k8s_release == "1.29"

    def test_loop_generates_templates(self, tmp_path):
        f = _write_hcl(
            tmp_path,
            "images.hcl",
            """
            project "images" {
            {% for distro in distros %}
                present "gridscale_template" {
                    name = "{{ distro }}"
                    snapshot_uuid = "snap-{{ distro }}"
                }
            {% endfor %}
            }
        """,
        )
        ws = Workspace(context={"distros": ["debian", "ubuntu"]})
        ws.load(f)
        specs = _specs(ws["images"])
        assert all(isinstance(spec, TemplateResource) for spec in specs)
        assert [(s.attrs.name, s.attrs.snapshot_uuid) for s in specs] == [
            ("debian", "snap-debian"),
            ("ubuntu", "snap-ubuntu"),
        ]

    def test_undefined_context_value_names_file(self, tmp_path):
        f = _write_hcl(
            tmp_path,
            "k8s.hcl",
            """
            project "prod" {
                ensure "gridscale_k8s" {
                    name = "cluster"
                    k8s_release = "{{ release }}"
                }
            }
        """,
        )
        with pytest.raises(ValueError, match="k8s.hcl.*'release' is undefined"):
            hcl.load(f, context={})

    def test_syntax_error_names_file(self, tmp_path):
        f = _write_hcl(tmp_path, "broken.hcl", 'project "p" {\n  name = "{{ unclosed"\n}\n')
        with pytest.raises(ValueError, match="broken.hcl"):
            hcl.load(f)


class TestScan:
    def test_scan_builds_typed_workspace(self, tmp_path):
        _write_hcl(
            tmp_path,
            "blueprints/k8s.hcl",
            """
            blueprint "k8s" {
                ensure "gridscale_k8s" {
                    name = "cluster"
                    k8s_release = "{{ release }}"
                }
            }
        """,
        )
        _write_hcl(
            tmp_path,
            "prod.hcl",
            """
            project "prod" {
                datacenter = "fra"
                use = ["k8s"]
            }
        """,
        )
        ws = hcl.scan(tmp_path, project_type=ClusterProject, context={"release": "1.30"})
        project = ws["prod"]
        assert isinstance(project, ClusterProject)
        assert project.datacenter == "fra"
        assert [s.attrs.k8s_release for s in _specs(project)] == ["1.30"]

    def test_scan_without_recursion(self, tmp_path):
        _write_hcl(tmp_path, "top.hcl", 'project "top" {\n  description = "top"\n}\n')
        _write_hcl(tmp_path, "nested/deep.hcl", 'project "deep" {\n  description = "deep"\n}\n')
        assert list(hcl.scan(tmp_path, recurse=False)) == ["top"]
        assert sorted(hcl.scan(tmp_path)) == ["deep", "top"]


class TestInterpolate:
    def test_env_reference(self, monkeypatch):
        monkeypatch.setenv("GS_TEST_ZONE", "zone-1")
        assert hcl.interpolate("${env.GS_TEST_ZONE}") == "zone-1"

    def test_several_references_in_one_string(self, monkeypatch):
        monkeypatch.setenv("GS_TEST_TEAM", "infra")
        monkeypatch.setenv("GS_TEST_STAGE", "prod")
        value = "${env.GS_TEST_TEAM}-${env.GS_TEST_STAGE}"
        assert hcl.interpolate(value) == "infra-prod"

    def test_unset_env_expands_empty(self, monkeypatch, caplog):
        monkeypatch.delenv("GS_TEST_UNSET", raising=False)
        with caplog.at_level(logging.WARNING, logger="gsprovider.hcl"):
            assert hcl.interpolate("zone-${env.GS_TEST_UNSET}") == "zone-"
        assert "Environment variable 'GS_TEST_UNSET' is not set" in caplog.text

    def test_cwd(self):
        assert hcl.interpolate("${CWD}/kubeconfig") == f"{os.getcwd()}/kubeconfig"

    def test_unknown_builtin_left_alone(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gsprovider.hcl"):
            assert hcl.interpolate("${HOME}") == "${HOME}"
        assert "Unknown variable 'HOME'" in caplog.text

    def test_lists(self, monkeypatch):
        monkeypatch.setenv("GS_TEST_STAGE", "prod")
        assert hcl.interpolate(["env:${env.GS_TEST_STAGE}", "os"]) == ["env:prod", "os"]

    def test_nested_dicts_and_lists(self, monkeypatch):
        monkeypatch.setenv("GS_TEST_ZONE", "zone-1")
        value = {"zone": {"uuid": "${env.GS_TEST_ZONE}", "tags": ["${env.GS_TEST_ZONE}"]}}
        assert hcl.interpolate(value) == {"zone": {"uuid": "zone-1", "tags": ["zone-1"]}}

    def test_other_values_unchanged(self):
        assert hcl.interpolate(16) == 16
        assert hcl.interpolate(True) is True
        assert hcl.interpolate(None) is None
        assert hcl.interpolate("storage_insane") == "storage_insane"


class TestInterpolationInResources:
    def test_k8s_attributes(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GS_TEST_ZONE", "zone-1")
        monkeypatch.setenv("GS_TEST_STAGE", "prod")
        f = _write_hcl(
            tmp_path,
            "k8s.hcl",
            """
            project "prod" {
                ensure "gridscale_k8s" {
                    name = "cluster-${env.GS_TEST_STAGE}"
                    k8s_release = "1.30"
                    security_zone_uuid = "${env.GS_TEST_ZONE}"
                    labels = ["env:${env.GS_TEST_STAGE}"]
                }
            }
        """,
        )
        ws = Workspace()
        ws.load(f)
        [spec] = _specs(ws["prod"])
        assert spec.attrs.name == "cluster-prod"
        assert spec.attrs.security_zone_uuid == "zone-1"
        assert spec.attrs.labels == ["env:prod"]

    def test_env_read_at_resolution(self, tmp_path, monkeypatch):
        f = _write_hcl(
            tmp_path,
            "images.hcl",
            """
            project "images" {
                present "gridscale_template" {
                    name = "base"
                    snapshot_uuid = "${env.GS_TEST_SNAPSHOT}"
                }
            }
        """,
        )
        ws = Workspace()
        ws.load(f)
        monkeypatch.setenv("GS_TEST_SNAPSHOT", "snap-1")
        assert _specs(ws["images"])[0].attrs.snapshot_uuid == "snap-1"
        monkeypatch.setenv("GS_TEST_SNAPSHOT", "snap-2")
        assert _specs(ws["images"])[0].attrs.snapshot_uuid == "snap-2"
