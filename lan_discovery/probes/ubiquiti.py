"""
Ubiquiti device discovery protocol (UDP port 10001).

A four byte request makes UniFi and airMAX devices answer with a TLV
encoded description of themselves. After a four byte header each field is
a one byte tag, a two byte big-endian length and the value.
"""

import socket
import time
from typing import Dict, List, Optional, Tuple

from ..core.data_models import DeviceIdentification, DeviceType, ProbeResult
from .base_probe import elapsed_ms, validate_target, validate_timeout

DISCOVERY_PORT = 10001
DISCOVERY_REQUEST = bytes([0x01, 0x00, 0x00, 0x00])
HEADER_LENGTH = 4
VENDOR_NAME = "Ubiquiti"
DEFAULT_MODEL = "UniFi Device"

# TLV tags of the discovery response
TAG_MAC = 0x01
TAG_MAC_IP = 0x02
TAG_FIRMWARE = 0x03
TAG_UPTIME = 0x0A
TAG_HOSTNAME = 0x0B
TAG_MODEL_SHORT = 0x0C
TAG_ESSID = 0x0D
TAG_WIRELESS_MODE = 0x0E
TAG_MODEL_FULL = 0x14

FIELD_TAGS = {
    TAG_MAC: "mac",
    TAG_MAC_IP: "mac_ip",
    TAG_FIRMWARE: "firmware",
    TAG_UPTIME: "uptime",
    TAG_HOSTNAME: "hostname",
    TAG_MODEL_SHORT: "model_short",
    TAG_ESSID: "essid",
    TAG_WIRELESS_MODE: "wireless_mode",
    TAG_MODEL_FULL: "model_full",
}

# Checked in order with a case-insensitive substring match
MODEL_NAMES: List[Tuple[Tuple[str, ...], str]] = [
    (("U7-Pro",), "U7-Pro (WiFi 7 AP)"),
    (("U6-Pro",), "U6-Pro (WiFi 6 AP)"),
    (("U6-LR",), "U6-LR (Long Range AP)"),
    (("U6-Lite",), "U6-Lite (WiFi 6 AP)"),
    (("U6-Mesh",), "U6-Mesh (Mesh AP)"),
    (("UAP-AC-Pro",), "UAP-AC-Pro"),
    (("UAP-AC-LR",), "UAP-AC-LR"),
    (("UAP-AC-Lite",), "UAP-AC-Lite"),
    (("UAP-AC-HD",), "UAP-AC-HD"),
    (("UAP-nanoHD",), "UAP-nanoHD"),
    (("USW-24",), "USW-24 (24-Port Switch)"),
    (("USW-16",), "USW-16 (16-Port Switch)"),
    (("USW-8",), "USW-8 (8-Port Switch)"),
    (("US-8-60W",), "US-8-60W (8-Port PoE Switch)"),
    (("US-8-150W",), "US-8-150W (8-Port PoE Switch)"),
    (("US-16-150W",), "US-16-150W (16-Port PoE Switch)"),
    (("US-24",), "US-24 (24-Port Switch)"),
    (("US-48",), "US-48 (48-Port Switch)"),
    (("USG",), "USG (Security Gateway)"),
    (("UDM-Pro",), "UDM-Pro (Dream Machine Pro)"),
    (("UDM-SE",), "UDM-SE (Dream Machine SE)"),
    (("UDM",), "UDM (Dream Machine)"),
    (("UXG-Pro",), "UXG-Pro (Next-Gen Gateway)"),
    (("NanoStation",), "NanoStation"),
    (("LiteBeam",), "LiteBeam"),
    (("PowerBeam",), "PowerBeam"),
    (("airMAX",), "airMAX"),
    (("UA-Hub", "UA Hub"), "UA Hub (Access Hub)"),
]

ACCESS_POINT_TOKENS = ("UAP", "U6", "U7", "NANOSTATION", "LITEBEAM", "POWERBEAM")
SWITCH_TOKENS = ("USW", "US-")
ROUTER_TOKENS = ("USG", "UDM", "UXG")


def map_ubiquiti_model(model: str) -> str:
    """
    Map a raw model code to a display name.

    Args:
        model: Model token from the discovery response

    Returns:
        str: Display name; unknown tokens are returned unchanged and an
        empty token becomes "UniFi Device"
    """
    lowered = model.lower()
    for tokens, display_name in MODEL_NAMES:
        if any(token.lower() in lowered for token in tokens):
            return display_name
    return model or DEFAULT_MODEL


def device_type_for_model(model: str) -> DeviceType:
    upper = model.upper()
    if any(token in upper for token in ACCESS_POINT_TOKENS):
        return DeviceType.ACCESS_POINT
    if any(token in upper for token in SWITCH_TOKENS):
        return DeviceType.SWITCH
    if any(token in upper for token in ROUTER_TOKENS):
        return DeviceType.ROUTER
    return DeviceType.DEVICE


def decode_fields(data: bytes) -> Dict[str, bytes]:
    """
    Split a discovery response into its named TLV fields.

    Parsing stops at the first truncated field. Unknown tags are skipped
    and repeated tags keep the first occurrence.
    """
    fields: Dict[str, bytes] = {}
    offset = HEADER_LENGTH
    length = len(data)
    while offset + 3 <= length:
        tag = data[offset]
        field_length = (data[offset + 1] << 8) | data[offset + 2]
        offset += 3
        if offset + field_length > length:
            break
        if tag in FIELD_TAGS:
            fields.setdefault(FIELD_TAGS[tag], data[offset:offset + field_length])
        offset += field_length
    return fields


def _text(value: bytes) -> str:
    if not value:
        return ""
    return value.decode("utf-8", errors="replace").replace("\x00", "").strip()


def parse_ubiquiti_response(data: bytes) -> Optional[DeviceIdentification]:
    """
    Build an identification from a raw discovery response.

    Returns:
        Optional[DeviceIdentification]: None when the response is too short
        or carries neither a hostname nor a model
    """
    if not data or len(data) < HEADER_LENGTH:
        return None

    fields = decode_fields(data)
    hostname = _text(fields.get("hostname"))
    firmware = _text(fields.get("firmware"))
    model = _text(fields.get("model_short")) or _text(fields.get("model_full"))

    if not hostname and not model:
        return None

    return DeviceIdentification(
        hostname=hostname,
        vendor=VENDOR_NAME,
        model=map_ubiquiti_model(model),
        firmware_version=firmware,
        device_type=device_type_for_model(model),
        source="ubiquiti",
    )


def query_ubiquiti(ip_address: str, timeout: float = 0.8) -> ProbeResult:
    """
    Send the discovery request and parse the reply.

    Returns:
        ProbeResult: POSITIVE with a DeviceIdentification as value
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    start = time.monotonic()
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.sendto(DISCOVERY_REQUEST, (ip_address, DISCOVERY_PORT))
            data, _ = sock.recvfrom(2048)
    except OSError:
        return ProbeResult.negative(elapsed_ms(start))

    identification = parse_ubiquiti_response(data)
    if identification is None:
        return ProbeResult.negative(elapsed_ms(start))
    return ProbeResult.positive(elapsed_ms(start), identification)
