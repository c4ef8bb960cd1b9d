"""Typed models for the static web assets runtime manifest.

The manifest is produced by the build as
``{identifier}.staticwebassets.runtime.json`` and describes a tree of nodes
keyed by path segment.  A node may carry a leaf asset (a content-root index
plus a sub-path) and may have children.  Example::

    {
      "ContentRoots": ["wwwroot"],
      "Root": {
        "Children": {
          "css": {
            "Children": {
              "site.css": {"Asset": {"ContentRootIndex": 0, "SubPath": "css/site.css"}}
            }
          }
        }
      }
    }

Field names are accepted in the build's PascalCase, in camelCase and in
snake_case.  Unknown keys (``Patterns`` and friends) are ignored.
"""

import os
from collections.abc import Iterator
from pathlib import Path, PurePosixPath, PureWindowsPath

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel, to_pascal

from synchronizers.errors import ManifestParseError

FILE_EXTENSION = ".staticwebassets.runtime.json"

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=AliasGenerator(
        validation_alias=lambda name: AliasChoices(to_pascal(name), to_camel(name), name),
    ),
)


class StaticWebAsset(BaseModel):
    """Leaf payload: where an asset lives and where it goes."""

    model_config = _MODEL_CONFIG

    content_root_index: int = Field(ge=0)
    sub_path: str

    @field_validator("sub_path")
    @classmethod
    def _inside_output_root(cls, v: str) -> str:
        # Destinations are written under the output root; no escaping it.
        posix = PurePosixPath(v.replace("\\", "/"))
        if not v or posix.is_absolute() or PureWindowsPath(v).drive or ".." in posix.parts:
            raise ValueError(f"sub path must be relative and stay inside the output root: {v!r}")
        return v


class ManifestNode(BaseModel):
    """A tree node; ``children`` preserves manifest order."""

    model_config = _MODEL_CONFIG

    asset: StaticWebAsset | None = None
    children: dict[str, "ManifestNode"] = Field(default_factory=dict)

    @field_validator("children", mode="before")
    @classmethod
    def _null_children(cls, v):
        return {} if v is None else v


class AssetManifest(BaseModel):
    """The whole manifest: content roots plus the node tree."""

    model_config = _MODEL_CONFIG

    content_roots: list[str] = Field(default_factory=list)
    root: ManifestNode | None = None

    @field_validator("content_roots", mode="before")
    @classmethod
    def _null_content_roots(cls, v):
        return [] if v is None else v

    @model_validator(mode="after")
    def _indices_in_range(self) -> "AssetManifest":
        # Without content roots the manifest is unusable anyway; skip the check.
        if not self.content_roots:
            return self
        for asset in self.enumerate_assets():
            if asset.content_root_index >= len(self.content_roots):
                raise ValueError(
                    f"content root index {asset.content_root_index} out of range "
                    f"for {len(self.content_roots)} content roots ({asset.sub_path})"
                )
        return self

    @property
    def is_usable(self) -> bool:
        return bool(self.content_roots) and self.root is not None

    @classmethod
    def load(
        cls, identifier: str, manifest_dir: str | os.PathLike
    ) -> "AssetManifest | None":
        """Load ``{manifest_dir}/{identifier}.staticwebassets.runtime.json``.

        Returns:
            The parsed manifest, or ``None`` if no such file exists.

        Raises:
            ValueError: If *identifier* is empty.
            ManifestParseError: If the file is not valid JSON or does not
                match the manifest shape.
        """
        if not identifier:
            raise ValueError("manifest identifier must not be empty")

        path = Path(manifest_dir) / f"{identifier}{FILE_EXTENSION}"
        if not path.is_file():
            return None

        try:
            return cls.model_validate_json(path.read_bytes())
        except ValidationError as exc:
            raise ManifestParseError(f"malformed manifest {path}: {exc}") from exc

    def enumerate_assets(self) -> Iterator[StaticWebAsset]:
        """Yield every asset in pre-order: a node's own asset, then its children.

        Each call walks the tree afresh.
        """
        if self.root is None:
            return iter(())
        return _walk(self.root)

    def resolve(self, asset: StaticWebAsset) -> tuple[str, str]:
        """Return ``(content_root, sub_path)`` for *asset*."""
        return self.content_roots[asset.content_root_index], asset.sub_path


def _walk(node: ManifestNode) -> Iterator[StaticWebAsset]:
    if node.asset is not None:
        yield node.asset
    for child in node.children.values():
        yield from _walk(child)
