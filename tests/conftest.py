"""Shared test fixtures for stencil-lang.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import pytest


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "stencil"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def page_source() -> str:
    """A small but realistic template touching every statement kind."""
    return (
        '{% extends "base.html" %}\n'
        "{% block content %}\n"
        "{% autoescape true %}\n"
        "<ul>\n"
        "{% for user in users %}\n"
        '  <li class="{{ loop.index is odd }}">{{ user.name|title ~ "!" }}</li>\n'
        "{% endfor %}\n"
        "</ul>\n"
        "{% endautoescape %}\n"
        "{% with total = users|length, label = {'one': 1, \"many\": [1, 2]} %}\n"
        "{% if total > 10 and not hidden %}many"
        "{% elif total == 0 %}none"
        "{% else %}{{ -total * 2 + items[0].price(1.5) }}{% endif %}\n"
        "{% endwith %}\n"
        "{% endblock content %}\n"
    )
