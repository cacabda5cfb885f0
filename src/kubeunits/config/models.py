"""Pydantic models for the deployment file.

The file is a mapping of unit keys to unit entries. Each entry carries
exactly one variant key (``noop``, ``shell``, ``manifest``, ``helmRemote``,
``helmLocal`` or ``group``) and an optional ``dependsOn`` list:

    ```yaml
    helmRepositories:
      - name: argo
        url: https://argoproj.github.io/argo-helm
    units:
      namespace:
        manifest:
          path: ./namespace.yaml
      argoCd:
        dependsOn: [namespace]
        helmRemote:
          name: argo-cd
          namespace: argocd
          chartName: argo/argo-cd
          chartVersion: 7.6.8
    ```

``UnitEntry.spec`` exposes the entry as a closed tagged union so that
callers dispatch on one of ``Noop``, ``Shell``, ``Manifest``,
``HelmRemote``, ``HelmLocal`` or ``Group``.
"""

from __future__ import annotations

from typing import Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Unit Payloads
# =============================================================================


class _FileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class Shell(_FileModel):
    """A command line run with ``bash -c``."""

    input: str = Field(description="Shell command line")


class Manifest(_FileModel):
    """A manifest applied with ``kubectl apply -f``."""

    path: str = Field(description="Path to the manifest file")


class HelmRemote(_FileModel):
    """A Helm release installed from a chart of a configured repository."""

    name: str = Field(description="Release name")
    namespace: str = Field(description="Release namespace")
    chart_name: str = Field(
        alias="chartName",
        description="Chart reference in the form <repository>/<chart>",
    )
    chart_version: str = Field(alias="chartVersion", description="Chart version")
    values: list[str] | None = Field(
        default=None, description="Values files passed with -f"
    )


class HelmLocal(_FileModel):
    """A Helm release installed from a chart directory on disk."""

    name: str = Field(description="Release name")
    namespace: str = Field(description="Release namespace")
    chart_path: str = Field(alias="chartPath", description="Chart directory")
    values: list[str] | None = Field(
        default=None, description="Values files passed with -f"
    )


class Noop(_FileModel):
    """A unit that does nothing, useful as a dependency anchor."""

    comment: str = ""


class Group(_FileModel):
    """A nested scope of units."""

    units: dict[str, UnitEntry]


UnitSpec = Union[Noop, Shell, Manifest, HelmRemote, HelmLocal, Group]

_VARIANT_FIELDS = ("noop", "shell", "manifest", "helm_remote", "helm_local", "group")


# =============================================================================
# Entries and Root
# =============================================================================


class UnitEntry(_FileModel):
    """One unit of a scope and the sibling keys it depends on."""

    noop: str | None = Field(default=None, description="Does nothing")
    shell: Shell | None = None
    manifest: Manifest | None = None
    helm_remote: HelmRemote | None = Field(default=None, alias="helmRemote")
    helm_local: HelmLocal | None = Field(default=None, alias="helmLocal")
    group: dict[str, UnitEntry] | None = Field(
        default=None, description="Nested units"
    )
    depends_on: list[str] | None = Field(
        default=None,
        alias="dependsOn",
        validation_alias=AliasChoices("dependsOn", "depends_on"),
        description="Keys of sibling units that must run first",
    )

    @model_validator(mode="after")
    def _check_single_variant(self) -> UnitEntry:
        declared = [name for name in _VARIANT_FIELDS if getattr(self, name) is not None]
        if len(declared) != 1:
            raise ValueError(
                "a unit must declare exactly one of noop, shell, manifest, "
                f"helmRemote, helmLocal, group (got {len(declared)})"
            )
        return self

    @property
    def spec(self) -> UnitSpec:
        """Return the variant payload of this entry."""
        if self.noop is not None:
            return Noop(comment=self.noop)
        if self.group is not None:
            return Group(units=self.group)
        payload = self.shell or self.manifest or self.helm_remote or self.helm_local
        if payload is None:
            raise ValueError("unit declares no variant")
        return payload

    @property
    def dependencies(self) -> list[str]:
        """Declared dependencies, empty when none are given."""
        return list(self.depends_on or [])


class HelmRepository(_FileModel):
    """A Helm chart repository registered with ``helm repo add``."""

    name: str = Field(description="Repository alias used as chart prefix")
    url: str = Field(description="Repository URL")


class Config(_FileModel):
    """Root of a deployment file."""

    helm_repositories: list[HelmRepository] | None = Field(
        default=None, alias="helmRepositories"
    )
    units: dict[str, UnitEntry] = Field(default_factory=dict)


Group.model_rebuild()
UnitEntry.model_rebuild()
