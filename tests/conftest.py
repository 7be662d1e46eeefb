import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from marktrim.nodes import ElementNode, TextNode  # noqa: E402
from marktrim.serialize import serialize  # noqa: E402

ELLIPSIS = "…"


@pytest.fixture(autouse=True)
def _isolate_marktrim_home(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path):
    """Point MARKTRIM_HOME at a temporary sandbox so we never touch the real home."""

    home = tmp_path / "marktrim-home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("MARKTRIM_HOME", str(home))
    for name in ("MARKTRIM_MAX_BYTES", "MARKTRIM_OMISSION", "MARKTRIM_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield home


@pytest.fixture
def el():
    """Shorthand element builder: el("p", "text", el("b", "bold"), cls="x")."""

    def _build(tag: str, *children, **attrs) -> ElementNode:
        attributes = {("class" if key == "cls" else key): value for key, value in attrs.items()}
        return ElementNode.build(tag, attributes, children)

    return _build


@pytest.fixture
def nbytes():
    """Serialized UTF-8 size of a node, or 0 for None."""

    def _size(node) -> int:
        if node is None:
            return 0
        return len(serialize(node).encode("utf-8"))

    return _size


@pytest.fixture
def sample_tree(el) -> ElementNode:
    return el(
        "div",
        el("p", "Café & crème ", el("em", "brûlée"), " for two"),
        el("ul", el("li", "first <item>"), el("li", "second item"), el("li", "third ☃")),
        TextNode("tail text"),
        cls="note",
    )
