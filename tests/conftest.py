from __future__ import annotations

from collections.abc import Callable

import pytest

from tests.helpers import build_epub, chapter


@pytest.fixture
def make_epub() -> Callable[..., bytes]:
    return build_epub


@pytest.fixture
def sample_epub() -> bytes:
    return build_epub(
        files={
            "OEBPS/text/ch1.xhtml": chapter("<h1>Chapter One</h1><p>It was a cold day.</p>"),
            "OEBPS/text/ch2.xhtml": chapter("<h1>Chapter Two</h1><p>The clocks struck.</p>"),
        },
        manifest={"ch1": "text/ch1.xhtml", "ch2": "text/ch2.xhtml"},
        spine=["ch1", "ch2"],
    )
