"""Definition set: the output contract handed to the code emitter.

A definition set maps module names (group identifiers) to the definitions
emitted into that module. Module iteration is always lexicographic and
definitions keep their insertion order, so re-running an import on
unchanged input yields byte-identical output (``to_json``/``fingerprint``).
"""

import hashlib
import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from kubeimport.errors import DuplicateDefinitionError
from kubeimport.models.canonical.api_object import ApiObjectDefinition


@dataclass(frozen=True)
class ResolvedDefinition:
    """An API object with its resolved identifiers.

    Attributes:
        identifier: Construct class name (e.g. "KubeDeployment")
        props_identifier: Props struct name (e.g. "KubeDeploymentProps")
        definition: The underlying API object definition
    """

    identifier: str
    props_identifier: str
    definition: ApiObjectDefinition

    def to_dict(self) -> dict[str, Any]:
        d = self.definition
        return {
            "identifier": self.identifier,
            "props": self.props_identifier,
            "fqn": d.fqn,
            "group": d.group,
            "version": d.version,
            "kind": d.kind,
            "apiVersion": d.gvk.api_version,
            "custom": d.custom,
            "schema": d.schema,
        }


@dataclass(frozen=True)
class DataTypeDefinition:
    """A plain data type (struct) that is not itself an API object.

    Attributes:
        identifier: Canonical type name (e.g. "DeploymentConditionV1Beta1")
        fqn: Fully qualified name in the source document
        schema: JSON schema of the type
    """

    identifier: str
    fqn: str
    schema: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "fqn": self.fqn, "schema": self.schema}


@dataclass(frozen=True)
class ChartDefinition:
    """A Helm chart construct.

    Attributes:
        identifier: Construct class name derived from the chart name
        values_identifier: Name of the values struct
        chart_name: Chart name
        chart_url: Repository URL or OCI reference
        chart_version: Semantic version of the chart
        dependencies: Names of the chart's dependencies (from Chart.yaml)
        values_schema: Sanitized ``values.schema.json`` if the chart has one
    """

    identifier: str
    values_identifier: str
    chart_name: str
    chart_url: str
    chart_version: str
    dependencies: tuple[str, ...] = ()
    values_schema: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "values": self.values_identifier,
            "chartName": self.chart_name,
            "chartUrl": self.chart_url,
            "chartVersion": self.chart_version,
            "dependencies": list(self.dependencies),
            "valuesSchema": self.values_schema,
        }


@dataclass
class ModuleDefinitions:
    """Everything emitted into a single module.

    Identifiers are unique across constructs, props structs, data types and
    charts of one module. ``add_*`` enforces this while the module is built.
    """

    name: str
    constructs: list[ResolvedDefinition] = field(default_factory=list)
    data_types: list[DataTypeDefinition] = field(default_factory=list)
    charts: list[ChartDefinition] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)
    _identifiers: set[str] = field(default_factory=set, repr=False)

    def has_identifier(self, identifier: str) -> bool:
        return identifier in self._identifiers

    def _claim(self, *identifiers: str) -> None:
        for identifier in identifiers:
            if identifier in self._identifiers:
                raise DuplicateDefinitionError(self.name, identifier)
        self._identifiers.update(identifiers)

    def add_construct(self, resolved: ResolvedDefinition) -> None:
        self._claim(resolved.identifier, resolved.props_identifier)
        self.constructs.append(resolved)

    def add_data_type(self, data_type: DataTypeDefinition) -> None:
        self._claim(data_type.identifier)
        self.data_types.append(data_type)

    def add_chart(self, chart: ChartDefinition) -> None:
        self._claim(chart.identifier, chart.values_identifier)
        self.charts.append(chart)

    def add_alias(self, fqn: str, identifier: str) -> None:
        """Map a fully qualified source name to the identifier it is emitted as."""
        self.aliases[fqn] = identifier

    @property
    def identifiers(self) -> list[str]:
        return sorted(self._identifiers)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"module": self.name}
        if self.constructs:
            result["constructs"] = [c.to_dict() for c in self.constructs]
        if self.data_types:
            result["dataTypes"] = [t.to_dict() for t in self.data_types]
        if self.charts:
            result["charts"] = [c.to_dict() for c in self.charts]
        if self.aliases:
            result["aliases"] = dict(sorted(self.aliases.items()))
        return result


@dataclass
class DefinitionSet:
    """Ordered, per-module collection of resolved definitions.

    Attributes:
        source: The import source the set was built from
        module_name_prefix: Optional prefix applied to emitted module names
    """

    source: str
    module_name_prefix: str | None = None
    _modules: dict[str, ModuleDefinitions] = field(default_factory=dict, repr=False)

    def module(self, name: str) -> ModuleDefinitions:
        """Get a module, creating it on first use."""
        if name not in self._modules:
            self._modules[name] = ModuleDefinitions(name=name)
        return self._modules[name]

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __getitem__(self, name: str) -> ModuleDefinitions:
        return self._modules[name]

    def __iter__(self) -> Iterator[ModuleDefinitions]:
        for name in self.module_names:
            yield self._modules[name]

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def module_names(self) -> list[str]:
        """Module names in lexicographic order."""
        return sorted(self._modules)

    def qualified_module_name(self, name: str) -> str:
        """Module name including the prefix (``<prefix>-<module>``)."""
        if self.module_name_prefix:
            return f"{self.module_name_prefix}-{name}"
        return name

    def qualified_identifier(self, module: str, identifier: str) -> str:
        """Identifier qualified by its (prefixed) module."""
        return f"{self.qualified_module_name(module)}.{identifier}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "moduleNamePrefix": self.module_name_prefix,
            "modules": [m.to_dict() for m in self],
        }

    def to_json(self) -> str:
        """Canonical JSON rendering (stable across runs)."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON rendering."""
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()
