#!/usr/bin/env python3
"""
Check that docs/test_scenarios_business_summary.md lists every scenario in
tests/test_integration_scenarios.py, and nothing else.

Run: python scripts/validate_test_docs_sync.py
Exit code is 1 when a test is undocumented; stale doc entries only warn.
"""

import re
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEST_FILE = PROJECT_ROOT / 'tests' / 'test_integration_scenarios.py'
DOC_FILE = PROJECT_ROOT / 'docs' / 'test_scenarios_business_summary.md'

CLASS_RE = re.compile(r'^class (Test\w+)')
METHOD_RE = re.compile(r'^\s+def (test_\w+)')
DOC_CLASS_RE = re.compile(r'\*\*Test Class\*\*:\s*`(Test\w+)`')
DOC_METHOD_RE = re.compile(r'\*\*Test Method\*\*:\s*`(test_\w+)`')


def scenario_tests(test_file: Path = TEST_FILE) -> dict[str, list[str]]:
    """Map each scenario class in the test file to its test methods."""
    scenarios: dict[str, list[str]] = {}
    current = None
    for line in test_file.read_text().splitlines():
        class_match = CLASS_RE.match(line)
        if class_match:
            current = class_match.group(1)
            scenarios[current] = []
        elif current:
            method_match = METHOD_RE.match(line)
            if method_match:
                scenarios[current].append(method_match.group(1))
    return scenarios


def documented_tests(doc_file: Path = DOC_FILE) -> tuple[set[str], set[str]]:
    """Classes and methods referenced in the business summary."""
    content = doc_file.read_text()
    return set(DOC_CLASS_RE.findall(content)), set(DOC_METHOD_RE.findall(content))


def compare(scenarios: dict[str, list[str]], doc_classes: set[str], doc_methods: set[str]):
    """Return (errors, warnings) describing any drift between tests and docs."""
    methods = {m for ms in scenarios.values() for m in ms}

    errors = [f"Missing class documentation: {c}" for c in sorted(set(scenarios) - doc_classes)]
    errors += [f"Missing method documentation: {m}" for m in sorted(methods - doc_methods)]
    warnings = [f"Documented class no longer exists: {c}" for c in sorted(doc_classes - set(scenarios))]
    warnings += [f"Documented method no longer exists: {m}" for m in sorted(doc_methods - methods)]
    return errors, warnings


def main() -> int:
    for path in (TEST_FILE, DOC_FILE):
        if not path.exists():
            print(f"❌ File not found: {path}")
            return 1

    scenarios = scenario_tests()
    doc_classes, doc_methods = documented_tests()
    errors, warnings = compare(scenarios, doc_classes, doc_methods)

    print("=" * 60)
    print("Scenario Documentation Sync")
    print("=" * 60)
    print(f"Scenario classes: {len(scenarios)}  documented: {len(doc_classes)}")
    print(f"Scenario tests:   {sum(len(m) for m in scenarios.values())}  documented: {len(doc_methods)}")

    if errors:
        print(f"\n❌ ERRORS ({len(errors)}):")
        for error in errors:
            print(f"   - {error}")
    if warnings:
        print(f"\n⚠️  WARNINGS ({len(warnings)}):")
        for warning in warnings:
            print(f"   - {warning}")
    if not errors and not warnings:
        print("\n✅ Every scenario is documented.")

    print("\nCoverage by scenario:")
    for cls, methods in sorted(scenarios.items()):
        print(f"\n  {'✅' if cls in doc_classes else '❌'} {cls}")
        for method in methods:
            print(f"      {'✅' if method in doc_methods else '❌'} {method}")

    return 1 if errors else 0


if __name__ == '__main__':
    sys.exit(main())
