"""Tests for data models."""

from pathlib import Path

from cc_scaffold.models import (
    AuditIssue,
    AuditReport,
    ComponentRef,
    ContextModel,
    ProjectConfig,
    ResolvedComponents,
    ScanResult,
    dedupe,
)


def test_dedupe_keeps_first_occurrence_order():
    assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestContextModel:
    def test_list_fields_behave_as_sets(self):
        context = ContextModel(tech_stack=["python", "python", "docker"], concerns=("security",))

        assert context.tech_stack == ["python", "docker"]
        assert context.concerns == ["security"]

    def test_none_lists_become_empty(self):
        assert ContextModel(architecture=None).architecture == []

    def test_unknown_values_are_kept(self):
        assert ContextModel(tech_stack=["cobol"]).tech_stack == ["cobol"]


def test_project_config_deduplicates_components():
    config = ProjectConfig(project_name="p", skills=["a", "a", "b"])

    assert config.skills == ["a", "b"]
    assert config.output_dir == Path(".claude")
    assert config.names().skills == ["a", "b"]


def test_scan_result_to_context():
    scan = ScanResult(name="x", project_type="cli-tool", tech_stack=["nodejs"], has_api=True)

    context = scan.to_context()

    assert context.project_type == "cli-tool"
    assert context.tech_stack == ["nodejs"]
    assert context.has_api is True
    assert context.concerns == []


def test_component_ref_status_flags():
    ref = ComponentRef(name="a", kind="skill", status="update")

    assert ref.is_update and not ref.is_new and not ref.is_existing
    assert ResolvedComponents(skills=[ref]).by_kind("skill") == [ref]


def test_audit_summary_counts():
    report = AuditReport(
        exists=True,
        issues=[
            AuditIssue(type="warning", message="a"),
            AuditIssue(type="warning", message="b"),
            AuditIssue(type="info", message="c"),
        ],
    )

    assert report.summary == {"error": 0, "warning": 2, "info": 1}
