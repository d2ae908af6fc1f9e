"""Pytest configuration and fixtures for Moustache tests."""

import logging

import pytest

from moustache import DictLoader, Engine


@pytest.fixture
def engine():
    """Create a basic Moustache Engine."""
    return Engine()


@pytest.fixture
def engine_raw():
    """Create an Engine with HTML escaping disabled."""
    return Engine(autoescape=False)


@pytest.fixture
def engine_with_partials():
    """Create an Engine with a DictLoader of partials."""
    return Engine(
        partials={
            "user": "<strong>{{name}}</strong>",
            "item": "- {{.}}\n",
            "list": "{{#items}}\n{{> item}}\n{{/items}}\n",
            "box": "[\n{{content}}\n]\n",
        }
    )


@pytest.fixture
def engine_with_loader():
    """Create an Engine whose main loader is a DictLoader of named templates."""
    loader = DictLoader(
        {
            "page": "<h1>{{title}}</h1>\n{{> footer}}",
            "greeting": "Hello {{name}}!",
        }
    )
    return Engine(loader=loader, partials={"footer": "<footer>{{year}}</footer>"})


@pytest.fixture
def captured_logger():
    """A dedicated logger at DEBUG so caplog sees every engine event."""
    logger = logging.getLogger("moustache.tests")
    logger.setLevel(logging.DEBUG)
    return logger


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )
