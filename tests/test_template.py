"""Tests for render document composition."""

import base64

import pytest

from mdsnap.modules.render.template import (
    BUNDLED_LIBRARY_NAME,
    CONTAINER_ID,
    LIBRARY_PLACEHOLDER,
    MARKDOWN_PLACEHOLDER,
    RESOURCES_DIR,
    MarkdownLibrary,
    compose_document,
    encode_markdown,
    load_markdown_library,
    load_template,
)
from mdsnap.shared.errors import LibraryNotFoundError


LIBRARY = MarkdownLibrary(source="window.marked = {parse: function (s) { return s; }};")


class TestComposeDocument:
    def test_template_has_placeholders_and_container(self) -> None:
        template = load_template()
        assert MARKDOWN_PLACEHOLDER in template
        assert LIBRARY_PLACEHOLDER in template
        assert f'id="{CONTAINER_ID}"' in template
        assert "window.markdownRendered = true" in template

    def test_markdown_is_base64_encoded(self) -> None:
        text = '# Héllo </script><script>alert("x")</script> `{{MARKED_SCRIPT}}`'
        html = compose_document(text, LIBRARY)

        assert "alert(" not in html
        assert encode_markdown(text) in html
        assert base64.b64decode(encode_markdown(text)).decode("utf-8") == text
        assert MARKDOWN_PLACEHOLDER not in html
        assert LIBRARY_PLACEHOLDER not in html

    def test_library_is_inlined(self) -> None:
        html = compose_document("hi", LIBRARY)
        assert LIBRARY.source in html

    def test_library_script_close_is_neutralised(self) -> None:
        library = MarkdownLibrary(source='var s = "</script>"; window.marked = {};')
        html = compose_document("hi", library)
        assert '"<\\/script>"' in html
        assert html.count("</script>") == 2

    def test_charset_added_when_missing(self) -> None:
        template = f"<html><head></head><body>{MARKDOWN_PLACEHOLDER}{LIBRARY_PLACEHOLDER}</body></html>"
        html = compose_document("x", LIBRARY, template=template)
        assert '<meta charset="UTF-8">' in html

    def test_missing_placeholder_rejected(self) -> None:
        with pytest.raises(ValueError):
            compose_document("x", LIBRARY, template="<html></html>")


class TestLoadMarkdownLibrary:
    def test_explicit_path(self, tmp_path) -> None:
        path = tmp_path / "marked.js"
        path.write_text("window.marked = {};")
        library = load_markdown_library(path)
        assert library.source == "window.marked = {};"
        assert library.path == path
        assert library.entry_point == "marked"

    def test_node_modules_lookup(self, tmp_path, monkeypatch) -> None:
        marked_dir = tmp_path / "node_modules" / "marked" / "lib"
        marked_dir.mkdir(parents=True)
        (marked_dir / "marked.umd.js").write_text("/* umd */")
        monkeypatch.chdir(tmp_path)

        library = load_markdown_library()
        assert library.source == "/* umd */"

    def test_min_preferred_over_umd(self, tmp_path, monkeypatch) -> None:
        marked_dir = tmp_path / "node_modules" / "marked"
        (marked_dir / "lib").mkdir(parents=True)
        (marked_dir / "lib" / "marked.umd.js").write_text("/* umd */")
        (marked_dir / "marked.min.js").write_text("/* min */")
        monkeypatch.chdir(tmp_path)

        assert load_markdown_library().source == "/* min */"

    def test_not_found(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "mdsnap.modules.render.template.RESOURCES_DIR", tmp_path / "no-resources"
        )
        with pytest.raises(LibraryNotFoundError) as exc_info:
            load_markdown_library(tmp_path / "missing.js")
        assert exc_info.value.code == "LIBRARY_NOT_FOUND"
        assert str(tmp_path / "missing.js") in exc_info.value.details["searched"]

    def test_bundled_copy_used_from_any_directory(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        library = load_markdown_library()
        assert library.path == RESOURCES_DIR / BUNDLED_LIBRARY_NAME
        assert "marked.parse = marked" in library.source
        assert "global.marked" in library.source
        assert "</script" not in library.source.lower()

    def test_node_modules_overrides_bundled_copy(self, tmp_path, monkeypatch) -> None:
        marked_dir = tmp_path / "node_modules" / "marked"
        marked_dir.mkdir(parents=True)
        (marked_dir / "marked.min.js").write_text("/* local */")
        monkeypatch.chdir(tmp_path)

        library = load_markdown_library()
        assert library.source == "/* local */"

    def test_bundled_copy_ships_with_license(self) -> None:
        assert (RESOURCES_DIR / "marked.LICENSE.md").is_file()
