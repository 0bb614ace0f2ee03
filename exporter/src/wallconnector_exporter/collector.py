"""prometheus_client collectors for Wall Connector stats."""

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from .fields import LIFETIME, VITALS, WIFI
from .registry import MetricDescriptor, RegistryBuilder
from .source import MetricSample, MetricSource


logger = logging.getLogger(__name__)


class WallConnectorCollector(Collector):
    """Scrapes every status endpoint concurrently on each collect.

    Nothing is cached between scrapes. A source that fails or runs past the
    timeout contributes no samples; the others are still reported.
    """

    def __init__(self, sources: Sequence[MetricSource], timeout: float = 10.0):
        self.sources = list(sources)
        self.timeout = timeout

    @classmethod
    def for_client(
        cls, client, namespace: str = "wallconnector", timeout: float = 10.0
    ) -> "WallConnectorCollector":
        builder = RegistryBuilder(namespace)
        return cls(
            [
                MetricSource(builder.build(VITALS), client.vitals),
                MetricSource(builder.build(LIFETIME), client.lifetime),
                MetricSource(builder.build(WIFI), client.wifi),
            ],
            timeout=timeout,
        )

    def describe_descriptors(self) -> List[MetricDescriptor]:
        descs = []
        for source in self.sources:
            descs.extend(source.describe())
        return descs

    async def collect_samples(self, timeout: Optional[float] = None) -> List[MetricSample]:
        timeout = self.timeout if timeout is None else timeout
        results = await asyncio.gather(*(s.collect(timeout) for s in self.sources))

        samples = []
        for source, result in zip(self.sources, results):
            logger.debug(f"Collected {len(result)} samples from {source.name}")
            samples.extend(result)
        return samples

    def describe(self) -> Iterable[Metric]:
        families: Dict[str, Metric] = {}
        for source in self.sources:
            for entry in source.registry.entries.values():
                desc = entry.descriptor
                if entry.skip or desc.name in families:
                    continue
                families[desc.name] = entry.kind.family(desc.name, desc.help, desc.label_keys)
        return list(families.values())

    def collect(self) -> Iterable[Metric]:
        samples = asyncio.run(self.collect_samples())
        return families_from_samples(samples)


def families_from_samples(samples: Iterable[MetricSample]) -> List[Metric]:
    """Group samples into one metric family per descriptor."""
    families: Dict[str, Metric] = {}
    for sample in samples:
        desc = sample.descriptor
        family = families.get(desc.name)
        if family is None:
            family = sample.kind.family(desc.name, desc.help, desc.label_keys)
            families[desc.name] = family
        family.add_metric(list(sample.label_values), sample.value)
    return list(families.values())


class UptimeCollector(Collector):
    """Start time and current time of the exporter, in unix seconds."""

    def __init__(self, start_time: Optional[float] = None):
        self.start_time = time.time() if start_time is None else start_time

    def describe(self) -> Iterable[Metric]:
        return [
            GaugeMetricFamily(
                "node_start_time_seconds",
                "Start time of the node since unix epoch in seconds.",
            ),
            GaugeMetricFamily(
                "node_current_time_seconds",
                "Current time of the node since unix epoch in seconds.",
            ),
        ]

    def collect(self) -> Iterable[Metric]:
        return [
            GaugeMetricFamily(
                "node_start_time_seconds",
                "Start time of the node since unix epoch in seconds.",
                value=self.start_time,
            ),
            GaugeMetricFamily(
                "node_current_time_seconds",
                "Current time of the node since unix epoch in seconds.",
                value=time.time(),
            ),
        ]
