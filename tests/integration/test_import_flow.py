"""End-to-end tests of the import pipeline.

Documents are served by the in-memory fetcher and Helm pulls copy the chart
fixture, so the whole dispatch, build, emit and persist flow runs offline.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pytest
import yaml

from kubeimport.config import KubeImportConfig
from kubeimport.emitters import MarkdownEmitter
from kubeimport.errors import DuplicateVersionError, InvalidManifestError, UnknownImportTypeError
from kubeimport.importers.dispatch import ImportKind
from kubeimport.pipeline import ImportPipeline, PipelineOptions

REGISTRY_URL = "https://doc.crds.dev/raw/github.com/acme/widgets@v1.0.0"


@pytest.fixture
def fetcher(crds_dir: Path, k8s_definitions: str, make_fetcher: Any) -> Any:
    """Fetcher serving the core API schema, CRD manifests and a registry document."""
    return make_fetcher(
        {
            "https://schemas.test/v1.22.0/_definitions.json": k8s_definitions,
            "crds/list.yaml": (crds_dir / "list.yaml").read_text(),
            "crds/multi_version.yaml": (crds_dir / "multi_version.yaml").read_text(),
            REGISTRY_URL: (crds_dir / "single_version.yaml").read_text(),
        }
    )


@pytest.fixture
def pipeline(config: KubeImportConfig, fetcher: Any) -> ImportPipeline:
    """Pipeline wired to the in-memory fetcher."""
    return ImportPipeline(config=config, fetcher=fetcher)


@pytest.fixture
def options(tmp_path: Path) -> PipelineOptions:
    """Pipeline options writing into tmp_path."""
    return PipelineOptions(outdir=tmp_path / "imports", config_path=tmp_path / "kubeimport.yaml")


def _persisted(options: PipelineOptions) -> list[str]:
    assert options.config_path is not None
    if not options.config_path.exists():
        return []
    return (yaml.safe_load(options.config_path.read_text()) or {}).get("imports", [])


class TestImportFlow:
    """Tests for running imports through the pipeline."""

    def test_crd_import(self, pipeline: ImportPipeline, options: PipelineOptions) -> None:
        """Test a CRD manifest is emitted per group and persisted."""
        results = pipeline.run(["crds/list.yaml"], options)

        assert results[0].kind is ImportKind.CRD
        assert [f.name for f in results[0].files] == ["stable.example.com.json"]
        assert results[0].saved
        assert _persisted(options) == ["crds/list.yaml"]

    def test_core_import_not_persisted(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
    ) -> None:
        """Test core API imports are emitted but never saved."""
        results = pipeline.run(["k8s"], options)

        assert results[0].kind is ImportKind.K8S
        assert [f.name for f in results[0].files] == ["k8s.json"]
        assert not results[0].saved
        assert _persisted(options) == []

    def test_registry_alias_persisted_as_written(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        fetcher: Any,
    ) -> None:
        """Test the alias (not the rewritten URL) is saved, with its prefix."""
        results = pipeline.run(["w:=github:acme/widgets@1"], options)

        assert results[0].kind is ImportKind.REGISTRY
        assert fetcher.requests == [REGISTRY_URL]
        assert [f.name for f in results[0].files] == ["w-testGroup.json"]
        assert _persisted(options) == ["w:=github:acme/widgets@1"]

    def test_helm_import(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        fake_helm_pull: list[list[str]],
    ) -> None:
        """Test a Helm chart is pulled, emitted and persisted."""
        source = "helm:https://charts.test/repo/mychart@1.2.3"

        results = pipeline.run([source], options)

        assert results[0].kind is ImportKind.HELM
        document = json.loads(results[0].files[0].read_text())
        assert document["charts"][0]["identifier"] == "Mychart"
        assert document["charts"][0]["dependencies"] == ["redis", "common"]
        assert _persisted(options) == [source]

    def test_no_save(self, pipeline: ImportPipeline, options: PipelineOptions) -> None:
        """Test --no-save leaves the import list alone."""
        options.save = False

        pipeline.run(["crds/list.yaml"], options)

        assert _persisted(options) == []

    def test_imports_run_in_order(self, pipeline: ImportPipeline, options: PipelineOptions) -> None:
        """Test several imports run sequentially and persist in order."""
        results = pipeline.run(["crds/multi_version.yaml", "k8s@1.22.0", "crds/list.yaml"], options)

        assert [r.kind for r in results] == [ImportKind.CRD, ImportKind.K8S, ImportKind.CRD]
        assert _persisted(options) == ["crds/multi_version.yaml", "crds/list.yaml"]

    def test_failure_stops_run(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        make_fetcher: Any,
        crds_dir: Path,
    ) -> None:
        """Test a failing import emits nothing and stops later imports."""
        text = (crds_dir / "multi_version.yaml").read_text()
        pipeline.dispatcher.fetcher = make_fetcher({"dup.yaml": f"{text}\n---\n{text}"})

        with pytest.raises(DuplicateVersionError):
            pipeline.run(["dup.yaml", "k8s"], options)

        assert not (options.outdir or Path()).exists()
        assert _persisted(options) == []

    def test_unknown_import_type(self, pipeline: ImportPipeline, options: PipelineOptions) -> None:
        """Test an empty source is rejected before anything runs."""
        with pytest.raises(UnknownImportTypeError):
            pipeline.run([""], options)

    def test_rerun_is_byte_identical(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        tmp_path: Path,
    ) -> None:
        """Test re-running an import on unchanged input gives identical output."""
        first = pipeline.run(["k8s", "crds/list.yaml"], options)
        contents = [f.read_bytes() for r in first for f in r.files]

        options.outdir = tmp_path / "again"
        second = pipeline.run(["k8s", "crds/list.yaml"], options)

        assert [f.read_bytes() for r in second for f in r.files] == contents
        assert [r.definitions.fingerprint() for r in first] == [
            r.definitions.fingerprint() for r in second
        ]
        assert _persisted(options) == ["crds/list.yaml"]

    def test_markdown_emitter(
        self,
        config: KubeImportConfig,
        fetcher: Any,
        options: PipelineOptions,
    ) -> None:
        """Test the pipeline hands definitions to the configured emitter."""
        pipeline = ImportPipeline(config=config, fetcher=fetcher, emitter=MarkdownEmitter())

        results = pipeline.run(["crds/multi_version.yaml"], options)

        content = results[0].files[0].read_text()
        assert results[0].files[0].name == "testGroup.md"
        assert "`TestNameKindV1Beta1`" in content

    def test_same_kind_distinct_prefixes(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        make_fetcher: Any,
        crds_dir: Path,
    ) -> None:
        """Test one kind in two groups imports into one outdir without colliding."""
        text = (crds_dir / "single_version.yaml").read_text()
        pipeline.dispatcher.fetcher = make_fetcher(
            {
                "crdA.yaml": text,
                "crdB.yaml": text.replace("testGroup", "otherGroup"),
            }
        )

        results = pipeline.run(["a:=crdA.yaml", "b:=crdB.yaml"], options)

        files = [f for r in results for f in r.files]
        assert [f.name for f in files] == ["a-testGroup.json", "b-otherGroup.json"]
        assert len({f.read_bytes() for f in files}) == 2

        exports = [json.loads(f.read_text())["exports"] for f in files]
        assert "a-testGroup.TestNameKind" in exports[0]
        assert "b-otherGroup.TestNameKind" in exports[1]
        assert not set(exports[0]) & set(exports[1])
        assert results[0].definitions.qualified_identifier("testGroup", "TestNameKind") != (
            results[1].definitions.qualified_identifier("otherGroup", "TestNameKind")
        )
        assert _persisted(options) == ["a:=crdA.yaml", "b:=crdB.yaml"]

    def test_group_cannot_escape_outdir(
        self,
        pipeline: ImportPipeline,
        make_fetcher: Any,
        crds_dir: Path,
        tmp_path: Path,
    ) -> None:
        """Test a group naming a path outside the output directory is rejected."""
        text = (crds_dir / "single_version.yaml").read_text()
        pipeline.dispatcher.fetcher = make_fetcher(
            {"escape.yaml": text.replace("group: testGroup", "group: ../../escaped")}
        )
        options = PipelineOptions(
            outdir=tmp_path / "a" / "b" / "imports",
            config_path=tmp_path / "kubeimport.yaml",
        )

        with pytest.raises(InvalidManifestError, match="is not a valid file name"):
            pipeline.run(["escape.yaml"], options)

        assert list(tmp_path.rglob("*.json")) == []
        assert _persisted(options) == []

    def test_import_logged_with_details(
        self,
        pipeline: ImportPipeline,
        options: PipelineOptions,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test each import logs its kind, modules and files for JSON output."""
        with caplog.at_level(logging.DEBUG, logger="kubeimport"):
            results = pipeline.run(["crds/list.yaml"], options)

        record = next(r for r in caplog.records if r.getMessage() == "Imported crds/list.yaml")
        assert record.extra_data == {  # type: ignore[attr-defined]
            "kind": "crd",
            "modules": ["stable.example.com"],
            "files": [str(results[0].files[0])],
        }
