"""
Keeps the business summary in docs/ in step with the integration scenarios.

Fails when a scenario class or test is added without a matching entry in
docs/test_scenarios_business_summary.md, or when the doc names a test that
no longer exists.
"""

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / 'scripts' / 'validate_test_docs_sync.py'


@pytest.fixture(scope="module")
def sync():
    spec = importlib.util.spec_from_file_location("validate_test_docs_sync", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestDocumentationSync:

    def test_files_exist(self, sync):
        assert sync.TEST_FILE.exists(), f"Test file not found: {sync.TEST_FILE}"
        assert sync.DOC_FILE.exists(), f"Documentation file not found: {sync.DOC_FILE}"

    def test_every_scenario_documented(self, sync):
        doc_classes, doc_methods = sync.documented_tests()
        errors, _ = sync.compare(sync.scenario_tests(), doc_classes, doc_methods)
        assert not errors, (
            "\n".join(errors) + "\nPlease update docs/test_scenarios_business_summary.md"
        )

    def test_no_stale_documentation(self, sync):
        doc_classes, doc_methods = sync.documented_tests()
        _, warnings = sync.compare(sync.scenario_tests(), doc_classes, doc_methods)
        assert not warnings, (
            "\n".join(warnings) + "\nPlease update docs/test_scenarios_business_summary.md"
        )

    def test_compare_reports_drift(self, sync):
        errors, warnings = sync.compare(
            {"TestA": ["test_one", "test_two"]}, {"TestA", "TestGone"}, {"test_one", "test_old"}
        )
        assert errors == ["Missing method documentation: test_two"]
        assert warnings == [
            "Documented class no longer exists: TestGone",
            "Documented method no longer exists: test_old",
        ]
