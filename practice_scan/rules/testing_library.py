"""React Testing Library rule suite."""

from __future__ import annotations

from practice_scan.rules.base import GraduatedThreshold, Rule
from practice_scan.rules.detectors import (
    Absent,
    DependencyDetector,
    FileCountDetector,
    FileExistsDetector,
    PatternDetector,
)
from practice_scan.scanner import WalkSelector

TEST_FILES = WalkSelector((".test.js", ".test.jsx", ".test.ts", ".test.tsx"), base="src")
SOURCES = WalkSelector((".js", ".jsx", ".ts", ".tsx"), base="src")


def _dependency_rule(package: str) -> Rule:
    return Rule(
        rule_id="rtl_" + package.rsplit("/", 1)[-1].replace("-", "_"),
        description=f"{package} dependency",
        detector=DependencyDetector((package,)),
        issue=f"{package} not installed",
        recommendation=f"Run: npm install --save-dev {package}",
    )


def testing_library_rules() -> list[Rule]:
    """Return the React Testing Library checks in report order."""
    return [
        _dependency_rule("@testing-library/react"),
        _dependency_rule("@testing-library/jest-dom"),
        _dependency_rule("@testing-library/user-event"),
        Rule(
            rule_id="test_files",
            description="Component test files",
            detector=FileCountDetector(TEST_FILES),
            issue="No test files found",
            recommendation="Add *.test.tsx files next to the components they cover.",
        ),
        Rule(
            rule_id="user_centric_queries",
            description="User-centric queries",
            detector=PatternDetector(
                SOURCES, (r"getByRole", r"getByLabelText", r"getByText", r"getByAltText")
            ),
            classification=GraduatedThreshold(good=2),
            issue="Few user-centric queries (getByRole, getByText)",
            recommendation="Prefer getByRole() and getByLabelText() over test ids.",
        ),
        Rule(
            rule_id="async_patterns",
            description="Async waiting patterns",
            detector=PatternDetector(SOURCES, (r"waitFor", r"findBy")),
            issue="No async waiting patterns (waitFor, findBy) detected",
            recommendation="Use waitFor() or findBy* queries for async UI updates.",
        ),
        Rule(
            rule_id="user_event_usage",
            description="userEvent interactions",
            detector=PatternDetector(SOURCES, (r"userEvent", r"user\.type", r"user\.click")),
            issue="No userEvent patterns found",
            recommendation="Use userEvent instead of fireEvent for realistic interactions.",
        ),
        Rule(
            rule_id="component_rendering",
            description="Component rendering in tests",
            detector=PatternDetector(TEST_FILES, (r"\brender\(",)),
            classification=GraduatedThreshold(good=2),
            issue="No component rendering patterns detected",
            recommendation="Render components with render() from @testing-library/react.",
        ),
        Rule(
            rule_id="screen_usage",
            description="screen object queries",
            detector=PatternDetector(SOURCES, (r"screen\.(getBy|findBy|queryBy)",)),
            issue="screen object not used for queries",
            recommendation="Query through the screen object instead of render() results.",
        ),
        Rule(
            rule_id="fire_event_avoided",
            description="fireEvent usage",
            detector=Absent(PatternDetector(SOURCES, (r"fireEvent\.",))),
            classification=GraduatedThreshold(good=2),
            issue="fireEvent used for interactions",
            recommendation="Replace fireEvent with userEvent for realistic interactions.",
        ),
        Rule(
            rule_id="container_queries_avoided",
            description="Direct DOM queries through container/root",
            detector=Absent(PatternDetector(SOURCES, (r"\.container", r"\.root"))),
            classification=GraduatedThreshold(good=2),
            issue="Direct DOM queries through container or root",
            recommendation="Query through the screen object instead of the DOM container.",
        ),
        Rule(
            rule_id="act_wrapper",
            description="act() wrapper usage",
            detector=PatternDetector(SOURCES, (r"\bact\(",)),
            issue="No act() wrapper usages found",
            recommendation="Wrap state updates outside RTL helpers in act().",
        ),
        Rule(
            rule_id="msw_installed",
            description="Mock Service Worker for API mocking",
            detector=DependencyDetector(("msw", "@testing-library/msw")),
            issue="Mock Service Worker not installed",
            recommendation="Consider Mock Service Worker (msw) for API mocking.",
        ),
        Rule(
            rule_id="setup_tests",
            description="Test setup file",
            detector=FileExistsDetector(("src/setupTests.js", "src/setupTests.ts")),
            issue="No setupTests file found",
            recommendation="Create src/setupTests.ts importing @testing-library/jest-dom.",
        ),
    ]
