"""
HTTP banner grabbing and router/NAS brand fingerprinting.

Embedded web interfaces usually name their vendor in the Server header or
in the Basic auth realm. The banner is fetched with a plain socket so only
the status line and headers are read.
"""

import re
import socket
import time
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..core.data_models import DeviceIdentification, ProbeResult
from .base_probe import elapsed_ms, validate_port, validate_target, validate_timeout

HTTP_PORTS = (80, 8080, 443, 8443, 8000, 8888)
MAX_HEADER_LINES = 30
USER_AGENT = "lan-discovery/1.0"

SERVER_PATTERN = re.compile(r"server:\s*([^\r\n]+)", re.IGNORECASE)
REALM_PATTERN = re.compile(r'realm="([^"]+)"', re.IGNORECASE)
VERSION_PATTERN = re.compile(r"\d+\.\d+\.?\d*\.?\d*")


@dataclass(frozen=True)
class BrandSignature:
    """
    A vendor recognisable from an HTTP banner.

    Attributes:
        vendor: Display name
        keywords: Lower-case substrings identifying the vendor
        model_prefixes: Prefixes of that vendor's model numbers
    """
    vendor: str
    keywords: Tuple[str, ...]
    model_prefixes: Tuple[str, ...]


BRAND_SIGNATURES: List[BrandSignature] = [
    BrandSignature("TP-Link", ("tp-link", "tplink"), ("TL-", "Archer", "Deco", "RE", "WR", "WA")),
    BrandSignature("ASUS", ("asus",), ("RT-", "ROG", "ZenWiFi", "TUF")),
    BrandSignature("Netgear", ("netgear",), ("RAX", "RBK", "WAX", "XR", "R")),
    BrandSignature("Linksys", ("linksys",), ("EA", "WRT", "MR", "MX")),
    BrandSignature("D-Link", ("d-link", "dlink"), ("DIR-", "DAP-", "DWR-", "DSL-")),
    BrandSignature("Cisco", ("cisco",), ("RV", "WAP", "SG", "SF")),
    BrandSignature("Huawei", ("huawei",), ("HG", "WS", "AX", "WiFi")),
    BrandSignature("MikroTik", ("mikrotik",), ("RB", "hAP", "hEX", "CCR", "CRS")),
    BrandSignature("Ubiquiti", ("ubiquiti", "unifi"), ("UAP", "USG", "USW", "UDM", "U6")),
    BrandSignature("Synology", ("synology",), ("DS", "RS", "RT")),
    BrandSignature("QNAP", ("qnap",), ("TS-", "TVS-", "TBS-")),
    BrandSignature("Xiaomi", ("xiaomi", "miwifi"), ("Mi Router", "AX", "AC", "R")),
]


def extract_model(banner: str, prefixes: Sequence[str]) -> str:
    """
    Find the first model number starting with one of the prefixes.

    A model number must contain a digit, which keeps short prefixes such
    as "R" from matching ordinary words.

    Returns:
        str: Upper-cased model number, or ""
    """
    for prefix in prefixes:
        pattern = re.compile(
            rf"\b({re.escape(prefix)}[ -]?[A-Z0-9-]*\d[A-Z0-9-]*)", re.IGNORECASE
        )
        match = pattern.search(banner)
        if match:
            return match.group(1).upper()
    return ""


def parse_http_banner(banner: str, mac_vendor: str = "") -> DeviceIdentification:
    """
    Derive vendor, model, version and a hostname hint from HTTP headers.

    Args:
        banner: Raw response headers
        mac_vendor: Vendor from the OUI table, used when no brand matches

    Returns:
        DeviceIdentification: Fields that could be derived; device type is
        left UNKNOWN for the classifier
    """
    server_match = SERVER_PATTERN.search(banner)
    server_header = server_match.group(1).strip() if server_match else ""
    realm_match = REALM_PATTERN.search(banner)
    realm = realm_match.group(1).strip() if realm_match else ""

    hostname = ""
    vendor = ""
    model = ""
    banner_lower = banner.lower()
    for signature in BRAND_SIGNATURES:
        if any(keyword in banner_lower for keyword in signature.keywords):
            vendor = signature.vendor
            model = extract_model(banner, signature.model_prefixes)
            break
    else:
        hostname = realm

    version_match = VERSION_PATTERN.search(server_header)

    return DeviceIdentification(
        hostname=hostname,
        vendor=vendor or mac_vendor,
        model=model,
        firmware_version=version_match.group(0) if version_match else "",
        source="http",
    )


def _read_headers(sock: socket.socket) -> str:
    lines = []
    with sock.makefile("r", encoding="latin-1", newline="") as reader:
        for _ in range(MAX_HEADER_LINES):
            line = reader.readline()
            if not line:
                break
            line = line.rstrip("\r\n")
            lines.append(line)
            if not line:
                break
    return "\n".join(lines)


def grab_http_banner(
    ip_address: str,
    ports: Sequence[int] = HTTP_PORTS,
    connect_timeout: float = 0.5,
    read_timeout: float = 1.0,
) -> ProbeResult:
    """
    Fetch the response headers of the first web port that answers.

    Returns:
        ProbeResult: POSITIVE with the raw header block as value
    """
    validate_target(ip_address)
    validate_timeout(connect_timeout)
    validate_timeout(read_timeout)
    for port in ports:
        validate_port(port)

    request = (
        f"GET / HTTP/1.1\r\nHost: {ip_address}\r\nUser-Agent: {USER_AGENT}\r\n"
        "Connection: close\r\n\r\n"
    ).encode("ascii")

    start = time.monotonic()
    for port in ports:
        try:
            with socket.create_connection((ip_address, port), timeout=connect_timeout) as sock:
                sock.settimeout(read_timeout)
                sock.sendall(request)
                banner = _read_headers(sock)
        except OSError:
            continue
        if banner:
            return ProbeResult.positive(elapsed_ms(start), banner)
    return ProbeResult.negative(elapsed_ms(start))
