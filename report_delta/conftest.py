import pytest

from report_delta.create_test_docs import (
    BASELINE_BLOCKS,
    BASELINE_ITEMS,
    CURRENT_BLOCKS,
    CURRENT_ITEMS,
    report_bytes,
)
from report_delta.models import Unit
from report_delta.segment import detect_flags, extract_client, sha1
from report_delta.text import normalize


def _make_unit(title, body="", anchor=0, flags=None, client=None, category=""):
    return Unit(
        key=sha1(normalize(title)),
        title=title,
        body=body,
        anchor=anchor,
        flags=detect_flags(f"{title}\n{body}") if flags is None else frozenset(flags),
        client=extract_client(title) if client is None else client,
        category=category
    )


@pytest.fixture
def make_unit():
    return _make_unit


@pytest.fixture
def baseline_docx():
    return report_bytes(BASELINE_ITEMS)


@pytest.fixture
def current_docx():
    return report_bytes(CURRENT_ITEMS)


@pytest.fixture
def baseline_blocks_docx():
    return report_bytes(BASELINE_BLOCKS)


@pytest.fixture
def current_blocks_docx():
    return report_bytes(CURRENT_BLOCKS)
