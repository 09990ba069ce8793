"""Unit tests for safe document parsing and CRD discovery."""

from pathlib import Path

import pytest

from kubeimport.errors import DocumentParseError, IllegalKeyError, SchemaValidationError
from kubeimport.schema.parse import (
    MAX_ALIAS_COUNT,
    collect_crds,
    safe_parse_crds,
    safe_parse_json,
    safe_parse_json_schema,
    safe_parse_yaml,
)
from kubeimport.schema.reviver import STRIPPED_VALUE, SafeReviver


def _alias_bomb(levels: int) -> str:
    """Return a YAML document where each level aliases the previous one ten times."""
    lines = ["l0: &l0 [x, x, x, x, x, x, x, x, x, x]"]
    for level in range(1, levels + 1):
        refs = ", ".join([f"*l{level - 1}"] * 10)
        lines.append(f"l{level}: &l{level} [{refs}]")
    return "\n".join(lines) + "\n"


class TestSafeParseYaml:
    """Tests for YAML parsing."""

    def test_multi_document(self) -> None:
        """Test every document of a stream is returned."""
        docs = safe_parse_yaml("a: 1\n---\nb: 2\n", SafeReviver())

        assert docs == [{"a": 1}, {"b": 2}]

    def test_only_true_false_are_booleans(self) -> None:
        """Test YAML 1.1 booleans like 'on' and 'yes' stay strings."""
        docs = safe_parse_yaml("a: on\nb: yes\nc: true\nd: False\n", SafeReviver())

        assert docs == [{"a": "on", "b": "yes", "c": True, "d": False}]

    def test_dates_stay_strings(self) -> None:
        """Test timestamps are not converted to datetime objects."""
        docs = safe_parse_yaml("created: 2024-01-01\n", SafeReviver())

        assert docs == [{"created": "2024-01-01"}]

    def test_invalid_yaml(self) -> None:
        """Test a malformed stream raises DocumentParseError."""
        with pytest.raises(DocumentParseError):
            safe_parse_yaml("a: [1, 2\n", SafeReviver())

    def test_values_are_sanitized(self) -> None:
        """Test parsed values go through the reviver."""
        docs = safe_parse_yaml("pattern: '^a;b$'\n", SafeReviver())

        assert docs == [{"pattern": STRIPPED_VALUE}]

    def test_aliases_expand(self) -> None:
        """Test ordinary anchors and aliases still resolve."""
        docs = safe_parse_yaml("base: &b {type: string}\na: *b\nc: *b\n", SafeReviver())

        assert docs[0]["a"] == docs[0]["c"] == {"type": "string"}

    def test_alias_limit(self) -> None:
        """Test flat aliases are allowed up to the limit and rejected beyond it."""
        def document(uses: int) -> str:
            return "base: &b x\nrefs: [" + ", ".join(["*b"] * uses) + "]\n"

        docs = safe_parse_yaml(document(MAX_ALIAS_COUNT), SafeReviver())
        assert len(docs[0]["refs"]) == MAX_ALIAS_COUNT

        with pytest.raises(DocumentParseError, match="excessive aliasing"):
            safe_parse_yaml(document(MAX_ALIAS_COUNT + 1), SafeReviver())

    def test_alias_limit_is_per_document(self) -> None:
        """Test the alias count restarts for each document of a stream."""
        document = "base: &b x\nrefs: [" + ", ".join(["*b"] * MAX_ALIAS_COUNT) + "]\n"

        docs = safe_parse_yaml(f"{document}---\n{document}", SafeReviver())

        assert len(docs) == 2

    def test_nested_alias_expansion_rejected(self) -> None:
        """Test a few hundred bytes of nested aliases cannot expand exponentially."""
        with pytest.raises(DocumentParseError, match="excessive aliasing"):
            safe_parse_yaml(_alias_bomb(9), SafeReviver())

    def test_deep_nesting_rejected(self) -> None:
        """Test a deeply nested document is a parse error."""
        with pytest.raises(DocumentParseError, match="nested too deeply"):
            safe_parse_yaml("[" * 5000 + "]" * 5000, SafeReviver())

    def test_scalar_keys_become_strings(self) -> None:
        """Test int, float, bool and null keys are read as their JSON spelling."""
        docs = safe_parse_yaml("default:\n  80: http\n  1.5: a\n  true: b\n  ~: c\n", SafeReviver())

        assert docs == [{"default": {"80": "http", "1.5": "a", "true": "b", "null": "c"}}]

    def test_complex_key_rejected(self) -> None:
        """Test a sequence used as a key is still rejected."""
        with pytest.raises(DocumentParseError):
            safe_parse_yaml("? [a, b]\n: c\n", SafeReviver())


class TestSafeParseJson:
    """Tests for JSON parsing."""

    def test_parse(self) -> None:
        """Test a JSON document is parsed and sanitized."""
        assert safe_parse_json('{"a": "b c"}', SafeReviver()) == {"a": STRIPPED_VALUE}

    def test_invalid_json(self) -> None:
        """Test malformed JSON raises DocumentParseError."""
        with pytest.raises(DocumentParseError):
            safe_parse_json("{", SafeReviver())

    def test_deep_nesting_rejected(self) -> None:
        """Test a deeply nested document is a parse error."""
        with pytest.raises(DocumentParseError, match="nested too deeply"):
            safe_parse_json("[" * 5000 + "]" * 5000, SafeReviver())


class TestCollectCrds:
    """Tests for CRD discovery."""

    def test_flattens_nested_lists(self) -> None:
        """Test CRDs are found at any List nesting depth and others are skipped."""
        crd_a = {"kind": "CustomResourceDefinition", "metadata": {"name": "a"}}
        crd_b = {"kind": "CustomResourceDefinition", "metadata": {"name": "b"}}
        objects = [
            None,
            {"kind": "ConfigMap"},
            {
                "kind": "List",
                "items": [
                    crd_a,
                    None,
                    {"kind": "Service"},
                    {"kind": "List", "items": [{"kind": "List", "items": [crd_b]}]},
                ],
            },
        ]

        assert collect_crds(objects) == [crd_a, crd_b]

    def test_list_without_items(self) -> None:
        """Test a List with no items contributes nothing."""
        assert collect_crds([{"kind": "List"}]) == []


class TestSafeParseCrds:
    """Tests for the full CRD parse path."""

    def test_list_fixture(self, crds_dir: Path) -> None:
        """Test only CRDs reachable through List wrappers are returned."""
        crds = safe_parse_crds((crds_dir / "list.yaml").read_text())

        names = [crd["metadata"]["name"] for crd in crds]
        assert names == ["crontabs.stable.example.com", "backups.stable.example.com"]

    def test_validation_errors_aggregated(self) -> None:
        """Test every invalid CRD is reported in one error."""
        manifest = """
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
spec:
  names:
    kind: First
---
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
spec:
  group: example.com
  names: {}
"""
        with pytest.raises(SchemaValidationError) as exc_info:
            safe_parse_crds(manifest)

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert any("'group' is a required property" in e for e in errors)
        assert any("'kind' is a required property" in e for e in errors)
        assert str(exc_info.value).startswith("Schema validation errors detected")

    def test_non_crd_objects_not_validated(self) -> None:
        """Test objects of other kinds are ignored even if they look broken."""
        manifest = "apiVersion: v1\nkind: ConfigMap\nspec: 5\n"

        assert safe_parse_crds(manifest) == []

    def test_illegal_key_rejects_manifest(self) -> None:
        """Test a bad key anywhere aborts the parse."""
        manifest = "apiVersion: v1\nkind: ConfigMap\ndata:\n  'bad key': x\n"

        with pytest.raises(IllegalKeyError):
            safe_parse_crds(manifest)

    def test_numeric_keys_accepted(self) -> None:
        """Test a default with numeric keys imports with string keys."""
        manifest = """
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
spec:
  group: example.com
  names:
    kind: Port
  versions:
    - name: v1
      schema:
        openAPIV3Schema:
          type: object
          default:
            80: http
"""
        crds = safe_parse_crds(manifest)

        schema = crds[0]["spec"]["versions"][0]["schema"]["openAPIV3Schema"]
        assert schema["default"] == {"80": "http"}

    def test_deep_nesting_rejected(self) -> None:
        """Test a deeply nested manifest is a parse error, not a crash."""
        with pytest.raises(DocumentParseError):
            safe_parse_crds("a: " + "[" * 3000 + "]" * 3000 + "\n")


class TestSafeParseJsonSchema:
    """Tests for JSON schema parsing."""

    def test_ref_and_schema_keys_allowed(self) -> None:
        """Test $ref and $schema survive sanitization."""
        text = (
            '{"$schema": "http://json-schema.org/draft-07/schema#",'
            ' "properties": {"a": {"$ref": "#/definitions/a"}},'
            ' "definitions": {"a": {"type": "string"}}}'
        )

        schema = safe_parse_json_schema(text)

        assert schema["$schema"] == "http://json-schema.org/draft-07/schema#"
        assert schema["properties"]["a"]["$ref"] == "#/definitions/a"

    def test_must_be_object(self) -> None:
        """Test a non-object document is rejected."""
        with pytest.raises(DocumentParseError):
            safe_parse_json_schema("[1, 2]")

    def test_invalid_schema_rejected(self) -> None:
        """Test a document that is not a JSON schema fails validation."""
        with pytest.raises(SchemaValidationError):
            safe_parse_json_schema('{"type": 5}')
