"""Integration tests for kubeimport CLI commands.

These tests run the CLI against fixture manifests on disk; nothing touches
the network and Helm is never executed.
"""

import json
import shutil
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from kubeimport import __version__
from kubeimport.cli import app

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fixtures_dir: Path) -> Path:
    """Create a project directory with local manifests and a core API schema."""
    shutil.copytree(fixtures_dir / "crds", tmp_path / "crds")
    schema_dir = tmp_path / "schemas" / "v1.22.0"
    schema_dir.mkdir(parents=True)
    shutil.copy(fixtures_dir / "k8s" / "_definitions.json", schema_dir / "_definitions.json")

    (tmp_path / "kubeimport.yaml").write_text(
        yaml.safe_dump(
            {
                "output": "imports",
                "k8s": {
                    "default_api_version": "1.22.0",
                    "schema_url": str(tmp_path / "schemas" / "v{version}" / "_definitions.json"),
                },
            }
        )
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestKubeimportImport:
    """Integration tests for `kubeimport import`."""

    def test_import_crd_manifest(self, project: Path) -> None:
        """Test a CRD manifest is emitted and persisted to the import list."""
        result = runner.invoke(app, ["import", "crds/multi_version.yaml"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        emitted = project / "imports" / "testGroup.json"
        assert emitted.is_file()
        assert str(Path("imports") / "testGroup.json") in result.stdout

        document = json.loads(emitted.read_text())
        assert [c["identifier"] for c in document["constructs"]] == [
            "TestNameKind",
            "TestNameKindV1Beta1",
        ]

        config = yaml.safe_load((project / "kubeimport.yaml").read_text())
        assert config["imports"] == ["crds/multi_version.yaml"]

    def test_import_with_module_prefix(self, project: Path) -> None:
        """Test NAME:= prefixes the emitted file."""
        result = runner.invoke(app, ["import", "crd:=crds/list.yaml", "--no-save"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        assert (project / "imports" / "crd-stable.example.com.json").is_file()
        assert "imports" not in yaml.safe_load((project / "kubeimport.yaml").read_text())

    def test_import_core_api_not_persisted(self, project: Path) -> None:
        """Test the core API import emits the k8s module and is never saved."""
        result = runner.invoke(app, ["import", "k8s"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        document = json.loads((project / "imports" / "k8s.json").read_text())
        assert document["constructs"][0]["identifier"] == "KubeDeployment"
        assert "imports" not in yaml.safe_load((project / "kubeimport.yaml").read_text())

    def test_import_options(self, project: Path) -> None:
        """Test output dir, class prefix, exclusions and format options."""
        result = runner.invoke(
            app,
            [
                "import", "k8s@1.22.0",
                "--output", "out",
                "--class-prefix", "K",
                "--exclude", "io.k8s.api.apps.v1beta1.Deployment",
                "--format", "markdown",
            ],
        )

        assert result.exit_code == 0, f"Command failed: {result.output}"
        content = (project / "out" / "k8s.md").read_text()
        assert "`KDeployment`" in content
        assert "KDeploymentV1Beta1" not in content

    def test_import_from_config_list(self, project: Path) -> None:
        """Test imports listed in the config run when no spec is given."""
        config_file = project / "kubeimport.yaml"
        data = yaml.safe_load(config_file.read_text())
        data["imports"] = ["crds/single_version.yaml", "k8s"]
        config_file.write_text(yaml.safe_dump(data))

        result = runner.invoke(app, ["import"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        assert (project / "imports" / "testGroup.json").is_file()
        assert (project / "imports" / "k8s.json").is_file()

    def test_nothing_to_import(self, project: Path) -> None:
        """Test an empty import list is an error."""
        result = runner.invoke(app, ["import"])

        assert result.exit_code == 1

    def test_invalid_manifest_fails(self, project: Path) -> None:
        """Test a manifest failing validation exits 1 and emits nothing."""
        (project / "bad.yaml").write_text(
            "apiVersion: apiextensions.k8s.io/v1\nkind: CustomResourceDefinition\nspec:\n  names: {}\n"
        )

        result = runner.invoke(app, ["import", "bad.yaml"])

        assert result.exit_code == 1
        assert not (project / "imports").exists()
        assert "imports" not in yaml.safe_load((project / "kubeimport.yaml").read_text())

    def test_missing_file_fails(self, project: Path) -> None:
        """Test a missing manifest exits 1."""
        result = runner.invoke(app, ["import", "crds/nope.yaml"])

        assert result.exit_code == 1

    def test_deeply_nested_document_fails_cleanly(self, project: Path) -> None:
        """Test a deeply nested document is reported as an error, not a crash."""
        (project / "deep.json").write_text("[" * 5000 + "]" * 5000)

        result = runner.invoke(app, ["import", "deep.json"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert not (project / "imports").exists()

    def test_alias_bomb_fails_cleanly(self, project: Path) -> None:
        """Test nested YAML aliases are rejected instead of expanded."""
        lines = ["l0: &l0 [x, x, x, x, x, x, x, x, x, x]"]
        for level in range(1, 10):
            lines.append(f"l{level}: &l{level} [" + ", ".join([f"*l{level - 1}"] * 10) + "]")
        (project / "bomb.yaml").write_text("\n".join(lines) + "\n")

        result = runner.invoke(app, ["import", "bomb.yaml"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_unknown_format_fails(self, project: Path) -> None:
        """Test an unknown output format exits 1."""
        result = runner.invoke(app, ["import", "k8s", "--format", "yaml"])

        assert result.exit_code == 1


class TestKubeimportCheck:
    """Integration tests for `kubeimport check`."""

    def test_check_json_output(self, project: Path) -> None:
        """Test check produces valid JSON with a helm entry."""
        result = runner.invoke(app, ["check", "--json"])

        assert result.exit_code in [0, 2]
        data = json.loads(result.stdout)
        assert data["checks"][0]["name"] == "helm"

    def test_check_required_helm_missing(self, project: Path) -> None:
        """Test a missing required helm binary exits 1."""
        config_file = project / "kubeimport.yaml"
        data = yaml.safe_load(config_file.read_text())
        data["helm"] = {"binary": "definitely-not-helm-binary"}
        config_file.write_text(yaml.safe_dump(data))

        result = runner.invoke(app, ["check", "--require-helm"])

        assert result.exit_code == 1
        assert "Preflight check FAILED" in result.stdout


class TestKubeimportInit:
    """Integration tests for `kubeimport init`."""

    def test_init_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test init writes a loadable default config."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        data = yaml.safe_load((tmp_path / "kubeimport.yaml").read_text())
        assert data["imports"] == ["k8s"]

    def test_init_refuses_overwrite(self, project: Path) -> None:
        """Test init keeps an existing config unless forced."""
        before = (project / "kubeimport.yaml").read_text()

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
        assert (project / "kubeimport.yaml").read_text() == before

        result = runner.invoke(app, ["init", "--force"])

        assert result.exit_code == 0
        assert (project / "kubeimport.yaml").read_text() != before


class TestKubeimportVersion:
    """Tests for the global --version flag."""

    def test_version(self) -> None:
        """Test --version prints the package version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
