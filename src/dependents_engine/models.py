"""Project records as stored in the metadata cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProjectRef:
    """An entry of the project index: a name and its repository URL."""

    name: str
    url: str

    @classmethod
    def from_dict(cls, data: dict) -> ProjectRef:
        return cls(name=data["name"], url=data.get("url") or "")

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "url": self.url}


@dataclass
class LatestInfo:
    """Manifest snapshot of the latest release."""

    version: str | None = None
    dependencies: dict[str, str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def dependency_names(self) -> list[str]:
        """Declared dependency names; an absent map counts as empty."""
        return list(self.dependencies or {})


@dataclass
class ProjectRecord:
    """Package metadata: name, repository URL, latest manifest.

    Keys the record does not model are kept in ``extra`` so that a
    cached document reads back unchanged.
    """

    name: str
    url: str
    latest: LatestInfo = field(default_factory=LatestInfo)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def ref(self) -> ProjectRef:
        return ProjectRef(self.name, self.url)

    def depends_on(self, name: str) -> bool:
        return name in (self.latest.dependencies or {})

    @classmethod
    def from_dict(cls, data: dict) -> ProjectRecord:
        latest_raw = dict(data.get("latest") or {})
        # Explicit nulls stay in extra so to_dict writes them back.
        version = latest_raw.pop("version") if latest_raw.get("version") is not None else None
        dependencies = (
            latest_raw.pop("dependencies") if latest_raw.get("dependencies") is not None else None
        )
        extra = {k: v for k, v in data.items() if k not in ("name", "url", "latest")}
        return cls(
            name=data["name"],
            url=data.get("url") or "",
            latest=LatestInfo(
                version=version,
                dependencies=dict(dependencies) if dependencies is not None else None,
                extra=latest_raw,
            ),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        latest: dict[str, Any] = dict(self.latest.extra)
        if self.latest.version is not None:
            latest["version"] = self.latest.version
        if self.latest.dependencies is not None:
            latest["dependencies"] = dict(self.latest.dependencies)
        data: dict[str, Any] = {"name": self.name, "url": self.url}
        data.update(self.extra)
        data["latest"] = latest
        return data
