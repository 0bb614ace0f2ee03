import copy

import httpx
import pytest


VITALS_PAYLOAD = {
    "contactor_closed": True,
    "vehicle_connected": True,
    "session_s": 120,
    "grid_v": 240.1,
    "grid_hz": 59.962,
    "vehicle_current_a": 16.2,
    "currentA_a": 16.0,
    "currentB_a": 15.9,
    "currentC_a": 0.0,
    "currentN_a": 0.4,
    "voltageA_v": 120.3,
    "voltageB_v": 119.8,
    "voltageC_v": 0.0,
    "relay_coil_v": 11.8,
    "pcba_temp_c": 17.9,
    "handle_temp_c": 13.1,
    "mcu_temp_c": 25.2,
    "uptime_s": 69828,
    "input_thermopile_uv": -176,
    "prox_v": 0.0,
    "pilot_high_v": 11.9,
    "pilot_low_v": 11.9,
    "session_energy_wh": 2.5,
    "config_status": 5,
    "evse_state": 1,
    "current_alerts": [],
    "evse_not_ready_reasons": [],
}

LIFETIME_PAYLOAD = {
    "contactor_cycles": 123,
    "contactor_cycles_loaded": 0,
    "alert_count": 45,
    "thermal_foldbacks": 0,
    "avg_startup_temp": 24.5,
    "charge_starts": 123,
    "energy_wh": 1000,
    "connector_cycles": 30,
    "uptime_s": 1000000,
    "charging_time_s": 36000,
}

WIFI_PAYLOAD = {
    "wifi_ssid": "SG9tZU5ldA==",
    "wifi_signal_strength": 67,
    "wifi_rssi": -56,
    "wifi_snr": 38,
    "wifi_connected": True,
    "wifi_infra_ip": "192.168.1.50",
    "internet": True,
    "wifi_mac": "AA:BB:CC:DD:EE:FF",
}

VERSION_PAYLOAD = {
    "firmware_version": "23.44.1+gabcdef",
    "part_number": "1529455-02-D",
    "serial_number": "PGT12345678901",
    "git_branch": "HEAD",
    "web_service": "1.0.0",
}

PAYLOADS = {
    "/api/1/vitals": VITALS_PAYLOAD,
    "/api/1/lifetime": LIFETIME_PAYLOAD,
    "/api/1/wifi_status": WIFI_PAYLOAD,
    "/api/1/version": VERSION_PAYLOAD,
}


def device_transport(payloads=None, failing=()):
    """Fake wall connector; paths in ``failing`` answer with a 500."""
    payloads = PAYLOADS if payloads is None else payloads

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path in failing:
            return httpx.Response(500, text="internal error")
        if request.url.path not in payloads:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, json=payloads[request.url.path])

    return httpx.MockTransport(handler)


@pytest.fixture
def payloads():
    return copy.deepcopy(PAYLOADS)


@pytest.fixture
def make_transport():
    return device_transport


@pytest.fixture
def transport():
    return device_transport()
