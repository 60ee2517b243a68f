"""
Render document composition.

The Markdown text travels base64-encoded and the conversion library is
inlined, so the composed document is self-contained and never fetches
anything at render time.
"""

import base64
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from mdsnap.shared.errors import LibraryNotFoundError
from mdsnap.shared.logging import get_logger

logger = get_logger(__name__)


RESOURCES_DIR = Path(__file__).parent / "resources"
TEMPLATE_PATH = RESOURCES_DIR / "template.html"

# marked 4.0.19 UMD build, MIT licensed (see resources/marked.LICENSE.md)
BUNDLED_LIBRARY_NAME = "marked.umd.js"

# Shared with the template's own script and the layout prober
CONTAINER_ID = "markdown-container"
CONTENT_ID = "markdown-content"

MARKDOWN_PLACEHOLDER = "{{MARKDOWN_CONTENT}}"
LIBRARY_PLACEHOLDER = "{{MARKED_SCRIPT}}"

# Relative to a node_modules/marked directory, preferred first
_MARKED_FILES = ("marked.min.js", os.path.join("lib", "marked.umd.js"))

_SCRIPT_CLOSE_RE = re.compile(r"</(script)", re.IGNORECASE)


@dataclass(frozen=True)
class MarkdownLibrary:
    """Source of the in-page Markdown-to-HTML converter."""
    source: str
    entry_point: str = "marked"
    path: Path | None = None


def library_candidates(explicit_path: str | Path | None = None) -> list[Path]:
    """Locations searched for the Markdown library, in priority order."""
    candidates: list[Path] = []
    if explicit_path:
        candidates.append(Path(explicit_path).expanduser())
    marked_dir = Path.cwd() / "node_modules" / "marked"
    candidates.extend(marked_dir / name for name in _MARKED_FILES)
    candidates.append(RESOURCES_DIR / BUNDLED_LIBRARY_NAME)
    return candidates


def load_markdown_library(explicit_path: str | Path | None = None) -> MarkdownLibrary:
    """
    Locate and read the Markdown library source.

    Raises:
        LibraryNotFoundError: if no candidate file exists
    """
    candidates = library_candidates(explicit_path)
    for path in candidates:
        if path.is_file():
            source = path.read_text(encoding="utf-8")
            logger.info(f"Loaded Markdown library from {path} ({len(source)} chars)")
            return MarkdownLibrary(source=source, path=path)

    raise LibraryNotFoundError(
        "Could not find marked.js. Reinstall mdsnap or set "
        "MDSNAP_MARKED_SCRIPT_PATH.",
        details={"searched": [str(p) for p in candidates]},
    )


@lru_cache(maxsize=1)
def load_template() -> str:
    return TEMPLATE_PATH.read_text(encoding="utf-8")


def encode_markdown(markdown_text: str) -> str:
    """UTF-8 then base64, safe to embed inside a JS string literal."""
    return base64.b64encode(markdown_text.encode("utf-8")).decode("ascii")


def _inline_script(source: str) -> str:
    # A literal "</script" would terminate the surrounding <script> element
    return _SCRIPT_CLOSE_RE.sub(r"<\\/\1", source)


def compose_document(
    markdown_text: str,
    library: MarkdownLibrary,
    template: str | None = None,
) -> str:
    """Build the self-contained HTML document for one render."""
    html = template if template is not None else load_template()

    if MARKDOWN_PLACEHOLDER not in html or LIBRARY_PLACEHOLDER not in html:
        raise ValueError("Template is missing a substitution placeholder")

    # Payload first: base64 can never contain the library placeholder
    html = html.replace(MARKDOWN_PLACEHOLDER, encode_markdown(markdown_text), 1)
    html = html.replace(LIBRARY_PLACEHOLDER, _inline_script(library.source), 1)

    if "charset" not in html.lower():
        html = html.replace("<head>", '<head>\n  <meta charset="UTF-8">', 1)
    return html
