import pytest

from repo_explorer.formatting import (
    breadcrumbs,
    crumb_path,
    file_icon,
    format_file_size,
    join_path,
    parent_path,
)


@pytest.mark.parametrize(
    ("name", "type", "icon"),
    [
        ("src", "dir", "📁"),
        ("app.JSX", "file", "🟨"),
        ("index.ts", "file", "🔷"),
        ("main.py", "file", "🐍"),
        ("README.md", "file", "📝"),
        ("logo.svg", "file", "🖼️"),
        ("Makefile", "file", "📄"),
    ],
)
def test_file_icon(name, type, icon):
    assert file_icon(name, type) == icon


@pytest.mark.parametrize(
    ("size", "text"),
    [
        (None, ""),
        (0, ""),
        (1, "1.0 B"),
        (1023, "1023.0 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 ** 4, "3072.0 GB"),
    ],
)
def test_format_file_size(size, text):
    assert format_file_size(size) == text


def test_breadcrumbs_and_parents():
    assert breadcrumbs("") == []
    assert breadcrumbs("/src/lib/") == ["src", "lib"]
    assert crumb_path(["src", "lib", "x"], 1) == "src/lib"
    assert parent_path("src/lib") == "src"
    assert parent_path("src") == ""

    with pytest.raises(IndexError):
        crumb_path(["src"], 1)


def test_join_path():
    assert join_path("src", "lib") == "src/lib"
    assert join_path("src/lib", "..") == "src"
    assert join_path("src/lib", "../../docs") == "docs"
    assert join_path("src", "/docs/guide.md") == "docs/guide.md"
    assert join_path("", "..") == ""
