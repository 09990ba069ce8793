"""Safe parsing of JSON and YAML schema documents.

Every parse runs the result through a SafeReviver before returning it, so
no caller ever sees an unsanitized tree.
"""

import json
import logging
import re
from typing import Any

import yaml
from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from yaml.composer import ComposerError

from kubeimport.errors import DocumentParseError, SchemaValidationError
from kubeimport.schema.crd_schema import CRD_KIND, LIST_KIND
from kubeimport.schema.reviver import DEFAULT_SANITIZERS, SafeReviver, meta_schema_sanitizer
from kubeimport.schema.validator import CrdSchemaValidator

logger = logging.getLogger(__name__)

BOOL_TAG = "tag:yaml.org,2002:bool"
TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

# weighted alias references allowed per document: each alias costs one plus
# the aliases nested inside the node it refers to
MAX_ALIAS_COUNT = 100


class SchemaLoader(yaml.SafeLoader):
    """SafeLoader that resolves scalars the way Kubernetes does.

    Only true/false are booleans (``on``, ``yes`` and friends stay strings)
    and dates stay strings, so documents round-trip through JSON. Scalar
    mapping keys are read as strings (``80: http`` has the key ``"80"``).

    Alias expansion is capped at MAX_ALIAS_COUNT per document, since the
    reviver copies every aliased node.
    """

    def compose_document(self) -> yaml.Node | None:
        self._alias_count = 0
        self._nested_aliases: dict[int, int] = {}
        return super().compose_document()

    def compose_node(self, parent: yaml.Node | None, index: Any) -> yaml.Node | None:
        if self.check_event(yaml.AliasEvent):
            mark = self.peek_event().start_mark
            node = super().compose_node(parent, index)
            self._alias_count += 1 + self._nested_aliases.get(id(node), 0)
            if self._alias_count > MAX_ALIAS_COUNT:
                raise ComposerError(
                    None,
                    None,
                    f"excessive aliasing (more than {MAX_ALIAS_COUNT} alias references)",
                    mark,
                )
            return node

        before = self._alias_count
        node = super().compose_node(parent, index)
        if self._alias_count > before:
            self._nested_aliases[id(node)] = self._alias_count - before
        return node

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        mapping = super().construct_mapping(node, deep=deep)
        return {_scalar_key(key): value for key, value in mapping.items()}


def _scalar_key(key: Any) -> Any:
    # same spelling json.dumps gives these keys; anything else is left for
    # the key policy to reject
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return key


SchemaLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (BOOL_TAG, TIMESTAMP_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SchemaLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _construct_value(loader: SchemaLoader, node: yaml.Node) -> str:
    # scalars that start with '=' (https://github.com/yaml/pyyaml/issues/89)
    return loader.construct_scalar(node)  # type: ignore[arg-type]


SchemaLoader.add_constructor("tag:yaml.org,2002:value", _construct_value)


def safe_parse_json(text: str, reviver: SafeReviver) -> Any:
    """Parse a JSON document and sanitize it.

    Raises:
        DocumentParseError: If the text is not JSON or is nested too deeply
    """
    try:
        return reviver.sanitize(json.loads(text))
    except json.JSONDecodeError as e:
        raise DocumentParseError(f"invalid JSON document: {e}") from e
    except RecursionError as e:
        raise DocumentParseError("invalid JSON document: nested too deeply") from e


def safe_parse_yaml(text: str, reviver: SafeReviver) -> list[Any]:
    """Parse a (multi-document) YAML stream and sanitize every document.

    Raises:
        DocumentParseError: If the text is not YAML, is nested too deeply or
            aliases too much
    """
    try:
        documents = list(yaml.load_all(text, Loader=SchemaLoader))
        return [reviver.sanitize(doc) for doc in documents]
    except yaml.YAMLError as e:
        raise DocumentParseError(f"invalid YAML document: {e}") from e
    except RecursionError as e:
        raise DocumentParseError("invalid YAML document: nested too deeply") from e


def collect_crds(objects: list[Any]) -> list[dict[str, Any]]:
    """Collect CRD objects, flattening ``kind: List`` wrappers at any depth.

    Empty documents and objects of other kinds are skipped.
    """
    crds: list[dict[str, Any]] = []
    for obj in objects:
        if not obj or not isinstance(obj, dict):
            continue
        kind = obj.get("kind")
        if kind == CRD_KIND:
            crds.append(obj)
        elif kind == LIST_KIND:
            crds.extend(collect_crds(obj.get("items") or []))
    return crds


def safe_parse_crds(text: str) -> list[dict[str, Any]]:
    """Parse, sanitize and validate every CRD in a manifest.

    A manifest may contain other kinds of objects too; only CRDs are
    validated and returned.

    Raises:
        DocumentParseError: If the manifest is not YAML or is nested too deeply
        IllegalKeyError: If a key violates the key policy
        SchemaValidationError: If any CRD violates the meta-schema
    """
    objects = safe_parse_yaml(text, SafeReviver())
    try:
        crds = collect_crds(objects)
        logger.debug("Found %d CRD object(s) in %d document(s)", len(crds), len(objects))
        CrdSchemaValidator().validate_all(crds)
    except RecursionError as e:
        raise DocumentParseError("manifest lists are nested too deeply") from e
    return crds


def safe_parse_json_schema(text: str) -> dict[str, Any]:
    """Parse and sanitize a JSON schema, then check that it is still a schema.

    ``$ref`` and ``$schema`` are allow-listed keys, and a well-formed
    ``$schema`` URI survives the value policy.

    Raises:
        SchemaValidationError: If the sanitized document is not a valid schema
    """
    reviver = SafeReviver(
        allowlisted_keys=("$ref", "$schema"),
        sanitizers=(meta_schema_sanitizer, *DEFAULT_SANITIZERS),
    )
    schema = safe_parse_json(text, reviver)
    if not isinstance(schema, dict):
        raise DocumentParseError("JSON schema document must be an object")

    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        raise SchemaValidationError([e.message]) from e
    except RecursionError as e:
        raise DocumentParseError("JSON schema document is nested too deeply") from e

    return schema
