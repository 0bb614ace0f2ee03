"""Turn a ``Schema`` into the immutable set of metrics a source can export."""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .fields import Conversion, FieldMetric, MetricKind, NO_CONVERSION, Schema


logger = logging.getLogger(__name__)


class SchemaError(ValueError):
    """A metric table that cannot be exported as declared."""


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help: str
    label_keys: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RegistryEntry:
    descriptor: Optional[MetricDescriptor]
    kind: Optional[MetricKind]
    label_values: Tuple[str, ...] = ()
    conversion: Conversion = NO_CONVERSION
    skip: bool = False


@dataclass(frozen=True)
class Registry:
    subsystem: str
    entries: Mapping[str, RegistryEntry]

    def get(self, field_name: str) -> Optional[RegistryEntry]:
        return self.entries.get(field_name)

    def descriptors(self) -> List[MetricDescriptor]:
        return [e.descriptor for e in self.entries.values() if not e.skip]


def build_fq_name(*parts: str) -> str:
    return "_".join(p for p in parts if p)


def parse_labels(field_name: str, labels) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    keys = []
    values = []
    for label in labels:
        key, sep, value = str(label).partition(":")
        if not sep or not key:
            raise SchemaError(f"invalid label {label!r} on field {field_name}")
        keys.append(key)
        values.append(value)
    return tuple(keys), tuple(values)


def resolve_kind(field_name: str, kind) -> MetricKind:
    try:
        return MetricKind(kind)
    except ValueError:
        raise SchemaError(f"unknown metric type {kind!r} on field {field_name}") from None


class RegistryBuilder:
    """Builds registries that share one descriptor per metric name.

    Several fields may map onto the same metric (for example one field per
    phase, told apart by a static label). The first field to register a name
    owns its descriptor; later ones reuse it so a registry never hands out two
    descriptors for the same name.
    """

    def __init__(self, namespace: str = "wallconnector"):
        self.namespace = namespace
        self._descriptors: Dict[str, MetricDescriptor] = {}
        self._kinds: Dict[str, MetricKind] = {}

    def build(self, schema: Schema) -> Registry:
        entries: Dict[str, RegistryEntry] = {}

        for field_name, meta in schema.fields.items():
            if meta is None or not meta.name:
                continue

            if meta.skip:
                entries[field_name] = RegistryEntry(
                    descriptor=None, kind=None, conversion=meta.conversion, skip=True
                )
                continue

            kind = resolve_kind(field_name, meta.kind)
            label_keys, label_values = parse_labels(field_name, meta.labels)
            entries[field_name] = RegistryEntry(
                descriptor=self._describe(schema.subsystem, meta, kind, label_keys),
                kind=kind,
                label_values=label_values,
                conversion=meta.conversion,
            )

        logger.debug(
            f"Built {schema.subsystem} registry with {len(entries)} fields "
            f"({sum(1 for e in entries.values() if e.skip)} skipped)"
        )
        return Registry(subsystem=schema.subsystem, entries=MappingProxyType(entries))

    def _describe(
        self,
        subsystem: str,
        meta: FieldMetric,
        kind: MetricKind,
        label_keys: Tuple[str, ...],
    ) -> MetricDescriptor:
        name = build_fq_name(self.namespace, subsystem, meta.name)
        existing = self._descriptors.get(name)
        if existing is not None:
            if self._kinds[name] is not kind:
                raise SchemaError(
                    f"metric {name} redeclared as {kind.value}, "
                    f"expected {self._kinds[name].value}"
                )
            if existing.label_keys != label_keys:
                raise SchemaError(
                    f"metric {name} redeclared with labels {label_keys}, "
                    f"expected {existing.label_keys}"
                )
            if existing.help != meta.help:
                logger.warning(f"Metric {name} redeclared with different help; keeping the first")
            return existing

        desc = MetricDescriptor(name=name, help=meta.help, label_keys=label_keys)
        self._descriptors[name] = desc
        self._kinds[name] = kind
        return desc
