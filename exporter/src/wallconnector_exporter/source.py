"""Fetch one status record and turn it into metric samples."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from .fields import MetricKind
from .metrics import (
    exporter_fetch_total,
    exporter_fetch_duration_seconds,
    exporter_last_success_timestamp_seconds,
    exporter_field_errors_total,
)
from .registry import MetricDescriptor, Registry, RegistryEntry


logger = logging.getLogger(__name__)

Record = Union[BaseModel, Mapping[str, Any]]
Fetcher = Callable[[float], Awaitable[Record]]


@dataclass(frozen=True)
class MetricSample:
    descriptor: MetricDescriptor
    kind: MetricKind
    value: float
    label_values: Tuple[str, ...] = ()


def record_items(record: Record) -> Dict[str, Any]:
    """Fields the device actually sent, including ones the model doesn't declare."""
    if isinstance(record, BaseModel):
        data = record.model_dump(exclude_unset=True)
        data.update(record.model_extra or {})
        return data
    return dict(record)


def numeric_value(value: Any) -> Optional[float]:
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return None


def resolve_label_values(entry: RegistryEntry, data: Mapping[str, Any]) -> Tuple[str, ...]:
    values = []
    for value in entry.label_values:
        if len(value) > 2 and value.startswith("{") and value.endswith("}"):
            resolved = data.get(value[1:-1])
            values.append("" if resolved is None else str(resolved))
        else:
            values.append(value)
    return tuple(values)


class MetricSource:
    """One status endpoint: a registry plus the fetcher that feeds it."""

    def __init__(self, registry: Registry, fetcher: Fetcher):
        self.registry = registry
        self.fetcher = fetcher

    @property
    def name(self) -> str:
        return self.registry.subsystem

    def describe(self) -> List[MetricDescriptor]:
        return self.registry.descriptors()

    async def collect(self, timeout: float) -> List[MetricSample]:
        start_time = time.monotonic()
        try:
            record = await asyncio.wait_for(self.fetcher(timeout), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Fetching {self.name} timed out after {timeout}s")
            exporter_fetch_total.labels(source=self.name, status="timeout").inc()
            return []
        except Exception as e:
            logger.warning(f"Fetching {self.name} failed: {e}")
            exporter_fetch_total.labels(source=self.name, status="error").inc()
            return []
        finally:
            exporter_fetch_duration_seconds.labels(source=self.name).observe(
                time.monotonic() - start_time
            )

        try:
            samples = self.emit(record)
        except Exception as e:
            logger.warning(f"Reading {self.name} record failed: {e}")
            exporter_fetch_total.labels(source=self.name, status="error").inc()
            return []

        exporter_fetch_total.labels(source=self.name, status="ok").inc()
        exporter_last_success_timestamp_seconds.labels(source=self.name).set(time.time())
        return samples

    def emit(self, record: Record) -> List[MetricSample]:
        data = record_items(record)
        samples = []

        for field_name, raw in data.items():
            entry = self.registry.get(field_name)
            if entry is None:
                logger.debug(f"Unknown key {self.name}.{field_name} ({type(raw).__name__})")
                continue
            if entry.skip:
                continue

            value = numeric_value(raw)
            if value is None:
                logger.warning(
                    f"Unsupported type for {self.name}.{field_name}: {type(raw).__name__}"
                )
                exporter_field_errors_total.labels(source=self.name, field=field_name).inc()
                continue

            samples.append(
                MetricSample(
                    descriptor=entry.descriptor,
                    kind=entry.kind,
                    value=entry.conversion.apply(value),
                    label_values=resolve_label_values(entry, data),
                )
            )

        return samples
