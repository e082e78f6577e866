"""Resource type identifiers: group/version/kind and its reductions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupVersion:
    group: str
    version: str

    def openapi_path(self) -> str:
        """Key of this group-version in the OpenAPI v3 discovery index."""
        if not self.group:
            return f"api/{self.version}"
        return f"apis/{self.group}/{self.version}"

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class GroupKind:
    """Version-agnostic resource identity, used to match CRDs."""

    group: str
    kind: str

    def __str__(self) -> str:
        if not self.group:
            return self.kind
        return f"{self.kind}.{self.group}"


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    def group_version(self) -> GroupVersion:
        return GroupVersion(self.group, self.version)

    def group_kind(self) -> GroupKind:
        return GroupKind(self.group, self.kind)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"
