"""Root pytest configuration for the RideMatch test suite.

Handles graceful degradation when optional runtime requirements are absent:

* ``GOOGLE_MAPS_API_KEY`` is required for any test that calls the live
  Directions API. Tests marked ``directions`` are automatically **skipped**
  (not failed) when the key is missing, with a message explaining how to
  enable them.

* ``slow`` tests run long genetic searches and are left to the developer to
  deselect with ``-m "not slow"``.
"""

from __future__ import annotations

import os

import pytest

# ---------------------------------------------------------------------------
# Marks that require a Google Maps API key to run
# ---------------------------------------------------------------------------

_API_KEY_MARKS: frozenset[str] = frozenset({"directions"})
_SKIP_MESSAGE = "GOOGLE_MAPS_API_KEY is not set."


def _has_api_key() -> bool:
    return bool(os.environ.get("GOOGLE_MAPS_API_KEY", "").strip())


# ---------------------------------------------------------------------------
# pytest hooks
# ---------------------------------------------------------------------------

def pytest_report_header(config: pytest.Config) -> list[str]:
    """Emit a status banner at the top of every test run."""
    sep = "─" * 60
    lines = [sep, "RideMatch Test Suite", sep]

    if _has_api_key():
        lines.append("  GOOGLE_MAPS_API_KEY : ✓  set  (directions tests ENABLED)")
    else:
        lines.append("  GOOGLE_MAPS_API_KEY : ✗  not set  (directions tests SKIPPED)")
        lines.append("")
        lines.append("  To run live directions tests, export the key and re-run:")
        lines.append("    export GOOGLE_MAPS_API_KEY=...")
        lines.append("    uv run pytest -m directions -v")

    lines.append(sep)
    return lines


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Auto-skip live directions tests when GOOGLE_MAPS_API_KEY is not set."""
    if _has_api_key():
        return

    skip_reason = pytest.mark.skip(
        reason=f"{_SKIP_MESSAGE} Export the key and re-run with: uv run pytest -m directions"
    )
    for item in items:
        item_marks = {m.name for m in item.iter_markers()}
        if item_marks & _API_KEY_MARKS:
            item.add_marker(skip_reason, append=False)


def pytest_terminal_summary(
    terminalreporter,  # type: ignore[type-arg]
    exitstatus: int,
    config: pytest.Config,
) -> None:
    """Append a footer to the terminal summary when tests were auto-skipped."""
    skipped = terminalreporter.stats.get("skipped", [])
    api_skips = [
        r for r in skipped
        if _SKIP_MESSAGE in str(getattr(r, "longrepr", ("", "", ""))[2])
    ]
    if not api_skips:
        return

    terminalreporter.write_sep(
        "-",
        f"{len(api_skips)} test(s) skipped, GOOGLE_MAPS_API_KEY not set",
    )
