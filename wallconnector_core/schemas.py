import base64
import binascii
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class StatusRecord(BaseModel):
    # Firmware updates add keys; keep them so the exporter can report them.
    model_config = ConfigDict(extra="allow")


class Vitals(StatusRecord):
    contactor_closed: Optional[bool] = None
    vehicle_connected: Optional[bool] = None
    session_s: Optional[int] = None
    grid_v: Optional[float] = None
    grid_hz: Optional[float] = None
    vehicle_current_a: Optional[float] = None
    currentA_a: Optional[float] = None
    currentB_a: Optional[float] = None
    currentC_a: Optional[float] = None
    currentN_a: Optional[float] = None
    voltageA_v: Optional[float] = None
    voltageB_v: Optional[float] = None
    voltageC_v: Optional[float] = None
    relay_coil_v: Optional[float] = None
    pcba_temp_c: Optional[float] = None
    handle_temp_c: Optional[float] = None
    mcu_temp_c: Optional[float] = None
    uptime_s: Optional[int] = None
    input_thermopile_uv: Optional[int] = None
    prox_v: Optional[float] = None
    pilot_high_v: Optional[float] = None
    pilot_low_v: Optional[float] = None
    session_energy_wh: Optional[float] = None
    config_status: Optional[int] = None
    evse_state: Optional[int] = None
    current_alerts: Optional[List[Any]] = None
    evse_not_ready_reasons: Optional[List[Any]] = None


class Lifetime(StatusRecord):
    contactor_cycles: Optional[int] = None
    contactor_cycles_loaded: Optional[int] = None
    alert_count: Optional[int] = None
    thermal_foldbacks: Optional[int] = None
    avg_startup_temp: Optional[float] = None
    charge_starts: Optional[int] = None
    energy_wh: Optional[int] = None
    connector_cycles: Optional[int] = None
    uptime_s: Optional[int] = None
    charging_time_s: Optional[int] = None


class Wifi(StatusRecord):
    wifi_ssid: Optional[str] = None
    wifi_signal_strength: Optional[int] = None
    wifi_rssi: Optional[int] = None
    wifi_snr: Optional[int] = None
    wifi_connected: Optional[bool] = None
    wifi_infra_ip: Optional[str] = None
    internet: Optional[bool] = None
    wifi_mac: Optional[str] = None

    @field_validator("wifi_ssid", mode="before")
    @classmethod
    def decode_ssid(cls, value: Any) -> Any:
        """The device reports the SSID base64 encoded."""
        if not isinstance(value, str):
            return value
        try:
            return base64.b64decode(value, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return value


class Version(StatusRecord):
    firmware_version: Optional[str] = None
    part_number: Optional[str] = None
    serial_number: Optional[str] = None
    git_branch: Optional[str] = None
    web_service: Optional[str] = None
