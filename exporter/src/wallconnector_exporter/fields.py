"""Metric metadata for the fields of each Wall Connector status record.

Every status endpoint gets a ``Schema``: a table keyed by the JSON field name
of the payload. A field mapped to ``None`` is known but not exported.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric


class MetricKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"

    def family(self, name: str, documentation: str, labels: Sequence[str]) -> Metric:
        if self is MetricKind.COUNTER:
            return CounterMetricFamily(name, documentation, labels=list(labels))
        return GaugeMetricFamily(name, documentation, labels=list(labels))


class ConversionKind(str, Enum):
    NONE = "none"
    INVERSE = "inverse"
    SCALE = "scale"


@dataclass(frozen=True)
class Conversion:
    kind: ConversionKind = ConversionKind.NONE
    factor: float = 1.0

    @classmethod
    def scale(cls, factor: float) -> "Conversion":
        return cls(ConversionKind.SCALE, factor)

    def apply(self, value: float) -> float:
        if self.kind is ConversionKind.INVERSE:
            if value == 0:
                # 1/0 is reported as an infinite value rather than failing the field.
                return math.copysign(math.inf, value)
            return 1 / value
        if self.kind is ConversionKind.SCALE:
            return value * self.factor
        return value


NO_CONVERSION = Conversion()
INVERSE = Conversion(ConversionKind.INVERSE)
WH_TO_JOULES = Conversion.scale(3600)
UV_TO_VOLTS = Conversion.scale(1e-6)


@dataclass(frozen=True)
class FieldMetric:
    name: str
    help: str
    kind: MetricKind = MetricKind.GAUGE
    # "key:value" pairs; a value of "{field}" is read from the record.
    labels: Tuple[str, ...] = ()
    conversion: Conversion = NO_CONVERSION
    skip: bool = False


@dataclass(frozen=True)
class Schema:
    subsystem: str
    fields: Mapping[str, Optional[FieldMetric]] = field(default_factory=dict)

    def exported(self) -> List[str]:
        return [
            key
            for key, meta in self.fields.items()
            if meta is not None and meta.name and not meta.skip
        ]


def _gauge(name: str, help: str, *labels: str, conversion: Conversion = NO_CONVERSION) -> FieldMetric:
    return FieldMetric(name, help, MetricKind.GAUGE, tuple(labels), conversion)


def _counter(name: str, help: str, *labels: str, conversion: Conversion = NO_CONVERSION) -> FieldMetric:
    return FieldMetric(name, help, MetricKind.COUNTER, tuple(labels), conversion)


VITALS = Schema(
    "vitals",
    {
        "contactor_closed": _gauge("contactor_closed", "Whether the contactor is closed."),
        "vehicle_connected": _gauge("vehicle_connected", "Whether a vehicle is plugged in."),
        "session_s": _counter("session_seconds", "Duration of the current charging session."),
        "grid_v": _gauge("grid_voltage", "Grid voltage in volts."),
        "grid_hz": _gauge("grid_frequency_hertz", "Grid frequency."),
        "vehicle_current_a": _gauge("vehicle_current_amps", "Current drawn by the vehicle."),
        "currentA_a": _gauge("phase_current_amps", "Current per phase.", "phase:a"),
        "currentB_a": _gauge("phase_current_amps", "Current per phase.", "phase:b"),
        "currentC_a": _gauge("phase_current_amps", "Current per phase.", "phase:c"),
        "currentN_a": _gauge("phase_current_amps", "Current per phase.", "phase:n"),
        "voltageA_v": _gauge("phase_voltage_volts", "Voltage per phase.", "phase:a"),
        "voltageB_v": _gauge("phase_voltage_volts", "Voltage per phase.", "phase:b"),
        "voltageC_v": _gauge("phase_voltage_volts", "Voltage per phase.", "phase:c"),
        "relay_coil_v": _gauge("relay_coil_volts", "Relay coil voltage."),
        "pcba_temp_c": _gauge("temperature_celsius", "Internal temperatures.", "sensor:pcba"),
        "handle_temp_c": _gauge("temperature_celsius", "Internal temperatures.", "sensor:handle"),
        "mcu_temp_c": _gauge("temperature_celsius", "Internal temperatures.", "sensor:mcu"),
        "uptime_s": _counter("uptime_seconds", "Time since the wall connector booted."),
        "input_thermopile_uv": _gauge(
            "input_thermopile_volts", "Input thermopile reading.", conversion=UV_TO_VOLTS
        ),
        "prox_v": _gauge("proximity_volts", "Proximity pin voltage."),
        "pilot_high_v": _gauge("pilot_volts", "Control pilot voltage.", "level:high"),
        "pilot_low_v": _gauge("pilot_volts", "Control pilot voltage.", "level:low"),
        "session_energy_wh": _counter(
            "session_energy_joules",
            "Energy delivered during the current session.",
            conversion=WH_TO_JOULES,
        ),
        # Undocumented bitfield.
        "config_status": FieldMetric("config_status", "Configuration status.", skip=True),
        "evse_state": _gauge("evse_state", "EVSE state machine state."),
        "current_alerts": None,
        "evse_not_ready_reasons": None,
    },
)

LIFETIME = Schema(
    "lifetime",
    {
        "contactor_cycles": _counter("contactor_cycles", "Contactor cycles."),
        "contactor_cycles_loaded": _counter(
            "contactor_cycles_loaded", "Contactor cycles while under load."
        ),
        "alert_count": _counter("alerts", "Alerts raised."),
        "thermal_foldbacks": _counter("thermal_foldbacks", "Thermal foldback events."),
        "avg_startup_temp": _gauge(
            "average_startup_temperature_celsius", "Average temperature at startup."
        ),
        "charge_starts": _counter("charge_starts", "Charging sessions started."),
        "energy_wh": _counter(
            "energy_joules", "Energy delivered over the unit's lifetime.", conversion=WH_TO_JOULES
        ),
        "connector_cycles": _counter("connector_cycles", "Plug insertions."),
        "uptime_s": _counter("uptime_seconds", "Total time powered on."),
        "charging_time_s": _counter("charging_seconds", "Total time spent charging."),
    },
)

WIFI = Schema(
    "wifi",
    {
        "wifi_ssid": None,
        "wifi_signal_strength": _gauge(
            "signal_strength_percent", "WiFi signal strength.", "ssid:{wifi_ssid}"
        ),
        "wifi_rssi": _gauge("rssi_dbm", "WiFi received signal strength.", "ssid:{wifi_ssid}"),
        "wifi_snr": _gauge("snr_db", "WiFi signal to noise ratio.", "ssid:{wifi_ssid}"),
        "wifi_connected": _gauge("connected", "Whether WiFi is connected.", "ssid:{wifi_ssid}"),
        "wifi_infra_ip": None,
        "internet": _gauge("internet_connected", "Whether the internet is reachable."),
        "wifi_mac": None,
    },
)
