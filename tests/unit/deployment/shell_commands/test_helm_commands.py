"""Tests for Helm release and repository commands."""

from unittest.mock import MagicMock

import pytest

from kubeunits.config.models import HelmLocal, HelmRemote
from kubeunits.deployment.shell_commands.helm import HelmCommands
from kubeunits.deployment.shell_commands.types import CommandResult, HelmRelease
from kubeunits.errors import CommandError

RELEASES_YAML = """\
- name: argo-cd
  namespace: argocd
  revision: "3"
  status: deployed
- name: cert-manager
  namespace: argocd
  revision: "1"
  status: deployed
"""


@pytest.fixture
def mock_runner() -> MagicMock:
    """Create a mock command runner."""
    runner = MagicMock()
    runner.dry_run = False
    runner.run.return_value = CommandResult(success=True, stdout="[]\n")
    return runner


@pytest.fixture
def helm_commands(mock_runner: MagicMock) -> HelmCommands:
    """Create HelmCommands instance with mock runner."""
    return HelmCommands(mock_runner)


@pytest.fixture
def remote_unit() -> HelmRemote:
    return HelmRemote(
        name="argo-cd",
        namespace="argocd",
        chart_name="argo/argo-cd",
        chart_version="7.6.8",
        values=["/deploy/argo-values.yaml"],
    )


class TestReleaseCommand:
    """Tests for building install/upgrade commands."""

    def test_remote_chart(self) -> None:
        cmd = HelmCommands.release_command(
            "install",
            "argo-cd",
            "argo/argo-cd",
            "argocd",
            chart_version="7.6.8",
            value_files=["a.yaml", "b.yaml"],
        )

        assert cmd == [
            "helm",
            "install",
            "argo-cd",
            "argo/argo-cd",
            "--version",
            "7.6.8",
            "--namespace",
            "argocd",
            "-f",
            "a.yaml",
            "-f",
            "b.yaml",
        ]

    def test_local_chart_has_no_version(self) -> None:
        cmd = HelmCommands.release_command("upgrade", "app", "/charts/app", "default")

        assert cmd == ["helm", "upgrade", "app", "/charts/app", "--namespace", "default"]


class TestDeploy:
    """Tests for install-or-upgrade decisions."""

    def test_absent_release_is_installed(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, remote_unit
    ) -> None:
        """A release missing from helm list is installed."""
        helm_commands.deploy_remote(remote_unit)

        mock_runner.run.assert_called_once_with(
            ["helm", "list", "--namespace", "argocd", "--output", "yaml"]
        )
        cmd = mock_runner.run_piped.call_args[0][0]
        assert cmd[:4] == ["helm", "install", "argo-cd", "argo/argo-cd"]
        assert cmd[-2:] == ["-f", "/deploy/argo-values.yaml"]

    def test_existing_release_is_upgraded(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, remote_unit
    ) -> None:
        """A release with the same name and namespace is upgraded."""
        mock_runner.run.return_value = CommandResult(success=True, stdout=RELEASES_YAML)

        helm_commands.deploy_remote(remote_unit)

        cmd = mock_runner.run_piped.call_args[0][0]
        assert cmd[1] == "upgrade"

    def test_same_name_in_other_namespace_is_installed(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        """Releases are matched on name and namespace together."""
        mock_runner.run.return_value = CommandResult(success=True, stdout=RELEASES_YAML)
        unit = HelmLocal(name="argo-cd", namespace="staging", chart_path="/charts/argo")

        helm_commands.deploy_local(unit)

        assert mock_runner.run_piped.call_args[0][0] == [
            "helm",
            "install",
            "argo-cd",
            "/charts/argo",
            "--namespace",
            "staging",
        ]

    def test_dry_run_skips_release_query(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, remote_unit
    ) -> None:
        """Dry runs never query the cluster and always plan an install."""
        mock_runner.dry_run = True
        mock_runner.run.return_value = CommandResult(success=True, stdout=RELEASES_YAML)

        helm_commands.deploy_remote(remote_unit)

        mock_runner.run.assert_not_called()
        assert mock_runner.run_piped.call_args[0][0][1] == "install"


class TestListReleases:
    """Tests for parsing helm list output."""

    def test_parses_releases(self, helm_commands: HelmCommands, mock_runner) -> None:
        mock_runner.run.return_value = CommandResult(success=True, stdout=RELEASES_YAML)

        assert helm_commands.list_releases("argocd") == [
            HelmRelease("argo-cd", "argocd"),
            HelmRelease("cert-manager", "argocd"),
        ]

    def test_empty_output(self, helm_commands: HelmCommands, mock_runner) -> None:
        mock_runner.run.return_value = CommandResult(success=True, stdout="")

        assert helm_commands.list_releases("argocd") == []

    def test_helm_failure_raises(self, helm_commands: HelmCommands, mock_runner) -> None:
        mock_runner.run.return_value = CommandResult(
            success=False, stderr="Kubernetes cluster unreachable", returncode=1
        )

        with pytest.raises(CommandError) as exc_info:
            helm_commands.list_releases("argocd")

        assert exc_info.value.details == "Kubernetes cluster unreachable"
        assert exc_info.value.returncode == 1

    @pytest.mark.parametrize("stdout", ["{not: [valid", "name: argo-cd\n", "- just-a-string\n"])
    def test_unexpected_output_raises(
        self, helm_commands: HelmCommands, mock_runner, stdout: str
    ) -> None:
        mock_runner.run.return_value = CommandResult(success=True, stdout=stdout)

        with pytest.raises(CommandError, match="Could not read helm releases"):
            helm_commands.list_releases("argocd")


class TestRepositories:
    """Tests for repository registration."""

    def test_repo_add(self, helm_commands: HelmCommands, mock_runner) -> None:
        helm_commands.repo_add("argo", "https://argoproj.github.io/argo-helm")

        mock_runner.run_piped.assert_called_once_with(
            ["helm", "repo", "add", "argo", "https://argoproj.github.io/argo-helm"]
        )

    def test_repo_update(self, helm_commands: HelmCommands, mock_runner) -> None:
        helm_commands.repo_update("argo")

        mock_runner.run_piped.assert_called_once_with(["helm", "repo", "update", "argo"])
