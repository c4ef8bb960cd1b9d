"""Unit tests for the static web assets manifest models.

Covers loading (absent / valid / malformed), field-name spellings, the
content-root index check, and pre-order restartable traversal.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from app.models.asset_manifest import AssetManifest, ManifestNode, StaticWebAsset
from synchronizers.errors import ManifestParseError


def _write(manifest_dir: Path, doc: dict | str, identifier: str = "Site") -> Path:
    manifest_dir.mkdir(parents=True, exist_ok=True)
    p = manifest_dir / f"{identifier}.staticwebassets.runtime.json"
    p.write_text(doc if isinstance(doc, str) else json.dumps(doc), encoding="utf-8")
    return p


_NESTED = {
    "ContentRoots": ["wwwroot", "/abs/lib"],
    "Root": {
        "Asset": {"ContentRootIndex": 0, "SubPath": "index.html"},
        "Children": {
            "css": {
                "Children": {
                    "site.css": {"Asset": {"ContentRootIndex": 0, "SubPath": "css/site.css"}},
                    "theme.css": {"Asset": {"ContentRootIndex": 1, "SubPath": "css/theme.css"}},
                },
            },
            "favicon.ico": {"Children": None, "Asset": {"ContentRootIndex": 0, "SubPath": "favicon.ico"}},
        },
        "Patterns": None,
    },
}


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


def test_load_absent_returns_none(tmp_path: Path) -> None:
    assert AssetManifest.load("Missing", tmp_path) is None


def test_load_empty_identifier_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        AssetManifest.load("", tmp_path)


def test_load_pascal_case_manifest(tmp_path: Path) -> None:
    _write(tmp_path, _NESTED)

    manifest = AssetManifest.load("Site", tmp_path)

    assert manifest is not None
    assert manifest.content_roots == ["wwwroot", "/abs/lib"]
    assert manifest.is_usable is True
    assert manifest.root.children["favicon.ico"].children == {}


def test_load_camel_case_manifest(tmp_path: Path) -> None:
    _write(tmp_path, {
        "contentRoots": ["wwwroot"],
        "root": {"children": {"a.js": {"asset": {"contentRootIndex": 0, "subPath": "a.js"}}}},
    })

    manifest = AssetManifest.load("Site", tmp_path)

    assert [a.sub_path for a in manifest.enumerate_assets()] == ["a.js"]


@pytest.mark.parametrize(
    "doc",
    [
        "{not json",
        {"ContentRoots": "wwwroot", "Root": {}},
        {"ContentRoots": ["wwwroot"], "Root": {"Asset": {"ContentRootIndex": "zero", "SubPath": "a"}}},
        {"ContentRoots": ["wwwroot"], "Root": {"Asset": {"ContentRootIndex": -1, "SubPath": "a"}}},
        {"ContentRoots": ["wwwroot"], "Root": {"Asset": {"ContentRootIndex": 0}}},
    ],
)
def test_load_malformed_raises_parse_error(tmp_path: Path, doc) -> None:
    _write(tmp_path, doc)

    with pytest.raises(ManifestParseError):
        AssetManifest.load("Site", tmp_path)


def test_out_of_range_content_root_index_raises(tmp_path: Path) -> None:
    _write(tmp_path, {
        "ContentRoots": ["wwwroot"],
        "Root": {"Children": {"x": {"Asset": {"ContentRootIndex": 1, "SubPath": "x"}}}},
    })

    with pytest.raises(ManifestParseError) as exc_info:
        AssetManifest.load("Site", tmp_path)

    assert "out of range" in str(exc_info.value)


@pytest.mark.parametrize(
    "sub_path", ["../evil.txt", "css/../../evil.txt", "/etc/passwd", "C:\\evil.txt", "..\\evil.txt", ""]
)
def test_sub_path_outside_output_root_raises(tmp_path: Path, sub_path: str) -> None:
    _write(tmp_path, {
        "ContentRoots": ["wwwroot"],
        "Root": {"Children": {"x": {"Asset": {"ContentRootIndex": 0, "SubPath": sub_path}}}},
    })

    with pytest.raises(ManifestParseError):
        AssetManifest.load("Site", tmp_path)


@pytest.mark.parametrize("sub_path", ["css/site.css", "a..b.css", ".well-known/x.json"])
def test_relative_sub_paths_are_accepted(sub_path: str) -> None:
    assert StaticWebAsset(content_root_index=0, sub_path=sub_path).sub_path == sub_path


def test_null_content_roots_load_as_empty(tmp_path: Path) -> None:
    _write(tmp_path, {"ContentRoots": None, "Root": {"Children": {}}})

    manifest = AssetManifest.load("Site", tmp_path)

    assert manifest.content_roots == []
    assert manifest.is_usable is False


def test_parse_error_is_a_value_error(tmp_path: Path) -> None:
    _write(tmp_path, "[]")

    with pytest.raises(ValueError):
        AssetManifest.load("Site", tmp_path)


# ---------------------------------------------------------------------------
# usability
# ---------------------------------------------------------------------------


def test_no_content_roots_is_not_usable() -> None:
    manifest = AssetManifest(
        content_roots=[],
        root=ManifestNode(asset=StaticWebAsset(content_root_index=3, sub_path="a")),
    )
    assert manifest.is_usable is False


def test_missing_root_is_not_usable() -> None:
    manifest = AssetManifest(content_roots=["wwwroot"])
    assert manifest.is_usable is False
    assert list(manifest.enumerate_assets()) == []


def test_models_are_frozen() -> None:
    asset = StaticWebAsset(content_root_index=0, sub_path="a.css")
    with pytest.raises(ValidationError):
        asset.sub_path = "b.css"


# ---------------------------------------------------------------------------
# traversal
# ---------------------------------------------------------------------------


def test_enumerate_assets_is_pre_order(tmp_path: Path) -> None:
    _write(tmp_path, _NESTED)
    manifest = AssetManifest.load("Site", tmp_path)

    assert [a.sub_path for a in manifest.enumerate_assets()] == [
        "index.html",
        "css/site.css",
        "css/theme.css",
        "favicon.ico",
    ]


def test_enumerate_assets_is_restartable(tmp_path: Path) -> None:
    _write(tmp_path, _NESTED)
    manifest = AssetManifest.load("Site", tmp_path)

    first = manifest.enumerate_assets()
    next(first)
    assert len(list(manifest.enumerate_assets())) == 4
    assert len(list(first)) == 3


def test_resolve_returns_content_root_and_sub_path(tmp_path: Path) -> None:
    _write(tmp_path, _NESTED)
    manifest = AssetManifest.load("Site", tmp_path)

    theme = [a for a in manifest.enumerate_assets() if a.sub_path.endswith("theme.css")][0]

    assert manifest.resolve(theme) == ("/abs/lib", "css/theme.css")
