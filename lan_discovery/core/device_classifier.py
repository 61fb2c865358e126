"""
Device Classification System for the LAN discovery engine.

This module classifies discovered hosts from the little a LAN scan can
learn about them:
- Hostname keywords (reverse DNS, NetBIOS, mDNS, HTTP realm)
- MAC vendor or vendor reported by a discovery protocol
- Open-port fingerprint from the thorough identification cascade

Keyword tables are plain ClassificationRule data and can be replaced
from classification.yml.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .data_models import DeviceType
from ..utils.logger import get_logger


@dataclass
class ClassificationRule:
    """
    A rule for classifying devices by hostname or vendor text.

    Attributes:
        name: Human-readable name for the rule
        device_type: The device type this rule classifies to
        keywords: Lower-case substrings that match
        prefixes: Lower-case prefixes that match
        suffixes: Lower-case suffixes that match
        exact: Lower-case values that match only as the whole text
        hostname_keywords: Vendor rules only; the hostname must also
            contain one of these
        use_port_fingerprint: Vendor rules only; prefer the open-port
            fingerprint over device_type when it is conclusive
    """
    name: str
    device_type: DeviceType
    keywords: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)
    suffixes: List[str] = field(default_factory=list)
    exact: List[str] = field(default_factory=list)
    hostname_keywords: List[str] = field(default_factory=list)
    use_port_fingerprint: bool = False

    def matches(self, value: str, hostname: str = "") -> bool:
        """
        Check the rule against lower-cased text.

        Args:
            value: Text the rule applies to (hostname or vendor)
            hostname: Lower-cased hostname for vendor rules with a hostname condition
        """
        if not value:
            return False
        hit = (
            value in self.exact
            or any(keyword in value for keyword in self.keywords)
            or any(value.startswith(prefix) for prefix in self.prefixes)
            or any(value.endswith(suffix) for suffix in self.suffixes)
        )
        if not hit:
            return False
        if self.hostname_keywords:
            return any(keyword in hostname for keyword in self.hostname_keywords)
        return True


DEFAULT_HOSTNAME_RULES: List[ClassificationRule] = [
    ClassificationRule("phone", DeviceType.PHONE, keywords=[
        "iphone", "android", "galaxy", "pixel", "oneplus", "huawei-", "xiaomi",
        "redmi", "oppo", "vivo", "phone",
    ]),
    ClassificationRule("tablet", DeviceType.TABLET, keywords=["ipad", "tablet", "galaxy-tab", "surface"]),
    ClassificationRule("laptop", DeviceType.LAPTOP, keywords=["macbook", "laptop"]),
    ClassificationRule("desktop", DeviceType.DESKTOP, keywords=["imac", "desktop", "pc-"],
                       prefixes=["desktop-"], suffixes=["-pc"]),
    ClassificationRule("smart_tv", DeviceType.SMART_TV, keywords=[
        "tv", "bravia", "roku", "firetv", "chromecast", "appletv", "smarttv", "android-tv",
    ]),
    ClassificationRule("game_console", DeviceType.GAME_CONSOLE, keywords=[
        "playstation", "ps4", "ps5", "xbox", "nintendo", "switch",
    ]),
    ClassificationRule("printer", DeviceType.PRINTER, keywords=[
        "printer", "epson", "canon", "hp-", "brother", "xerox",
    ]),
    ClassificationRule("camera", DeviceType.CAMERA, keywords=[
        "camera", "ipcam", "cam-", "hikvision", "dahua", "reolink",
    ]),
    ClassificationRule("nas", DeviceType.NAS, keywords=["nas", "synology", "qnap", "diskstation"]),
    ClassificationRule("smart_speaker", DeviceType.SMART_SPEAKER, keywords=[
        "echo", "alexa", "google-home", "homepod", "nest-",
    ]),
    ClassificationRule("media_player", DeviceType.MEDIA_PLAYER, keywords=["sonos", "plex", "kodi", "shield"]),
    ClassificationRule("wearable", DeviceType.WEARABLE, keywords=["watch", "band", "fitbit", "garmin"]),
]

PC_VENDORS = ["intel", "dell", "lenovo", "hp", "acer", "asus", "msi", "gigabyte"]

DEFAULT_VENDOR_RULES: List[ClassificationRule] = [
    ClassificationRule("phone_vendor", DeviceType.PHONE, exact=[
        "samsung", "xiaomi", "huawei", "oppo", "vivo", "oneplus", "realme", "motorola",
        "nokia", "lg electronics", "zte", "meizu",
    ]),
    ClassificationRule("enterprise_network_vendor", DeviceType.ROUTER, exact=[
        "cisco", "juniper", "arista", "fortinet", "palo alto", "sonicwall",
    ]),
    ClassificationRule("consumer_network_vendor", DeviceType.ROUTER, exact=[
        "tp-link", "netgear", "asus", "d-link", "linksys", "mikrotik", "ubiquiti",
    ], use_port_fingerprint=True),
    ClassificationRule("printer_vendor", DeviceType.PRINTER, exact=[
        "hewlett packard", "hp", "canon", "epson", "brother", "xerox", "lexmark", "ricoh", "kyocera",
    ]),
    ClassificationRule("tv_vendor", DeviceType.SMART_TV, exact=["sony", "tcl", "hisense", "vizio", "roku"]),
    ClassificationRule("playstation", DeviceType.GAME_CONSOLE, keywords=["sony"], hostname_keywords=["playstation"]),
    ClassificationRule("xbox", DeviceType.GAME_CONSOLE, keywords=["microsoft"], hostname_keywords=["xbox"]),
    ClassificationRule("nintendo", DeviceType.GAME_CONSOLE, keywords=["nintendo"]),
    ClassificationRule("iot_vendor", DeviceType.IOT, exact=[
        "espressif", "tuya", "shenzhen", "sonoff", "tasmota", "wemo", "philips hue", "lifx",
        "yeelight", "smartthings", "nest", "ring", "arlo", "wyze",
    ]),
    ClassificationRule("camera_vendor", DeviceType.CAMERA, exact=[
        "hikvision", "dahua", "axis", "reolink", "amcrest", "foscam", "lorex",
    ]),
    ClassificationRule("nas_vendor", DeviceType.NAS, exact=[
        "synology", "qnap", "western digital", "seagate", "buffalo", "asustor", "terramaster",
    ]),
    ClassificationRule("amazon_speaker", DeviceType.SMART_SPEAKER, keywords=["amazon"],
                       hostname_keywords=["echo", "alexa"]),
    ClassificationRule("google_speaker", DeviceType.SMART_SPEAKER, keywords=["google"], hostname_keywords=["home"]),
    ClassificationRule("sonos", DeviceType.MEDIA_PLAYER, keywords=["sonos"]),
    ClassificationRule("apple_phone", DeviceType.PHONE, keywords=["apple"], hostname_keywords=["iphone"]),
    ClassificationRule("apple_tablet", DeviceType.TABLET, keywords=["apple"], hostname_keywords=["ipad"]),
    ClassificationRule("apple_laptop", DeviceType.LAPTOP, keywords=["apple"], hostname_keywords=["macbook"]),
    ClassificationRule("apple_desktop", DeviceType.DESKTOP, keywords=["apple"], hostname_keywords=["imac", "mac-"]),
    ClassificationRule("apple_tv", DeviceType.SMART_TV, keywords=["apple"], hostname_keywords=["appletv", "apple-tv"]),
    ClassificationRule("apple_speaker", DeviceType.SMART_SPEAKER, keywords=["apple"], hostname_keywords=["homepod"]),
    ClassificationRule("apple_watch", DeviceType.WEARABLE, keywords=["apple"], hostname_keywords=["watch"]),
    ClassificationRule("apple", DeviceType.DEVICE, keywords=["apple"]),
    ClassificationRule("pc_laptop", DeviceType.LAPTOP, exact=PC_VENDORS, hostname_keywords=["laptop", "notebook"]),
    ClassificationRule("pc_vendor", DeviceType.DESKTOP, exact=PC_VENDORS),
    ClassificationRule("raspberry_pi", DeviceType.IOT, keywords=["raspberry"]),
]

ROUTER_MODEL_NAMES = {
    "tp-link": "Wireless Router",
    "asus": "Wireless Router",
    "netgear": "Wireless Router",
    "d-link": "Wireless Router",
    "huawei": "Wireless Router",
    "cisco": "Network Router",
    "mikrotik": "RouterBoard",
    "ubiquiti": "UniFi Gateway",
}


def classify_by_ports(open_ports: Iterable[int]) -> DeviceType:
    """
    Classify a host from the set of open fingerprint ports.

    Rules are checked in order; the first match wins.

    Returns:
        DeviceType: UNKNOWN when the ports say nothing conclusive
    """
    ports = set(open_ports or ())
    if not ports:
        return DeviceType.UNKNOWN

    if ports & {9100, 515, 631}:
        return DeviceType.PRINTER
    if ports & {5000, 5001}:
        return DeviceType.NAS
    if ports & {32400, 8096}:
        return DeviceType.MEDIA_PLAYER
    if 62078 in ports:
        return DeviceType.PHONE
    if 554 in ports and 53 not in ports:
        return DeviceType.CAMERA
    if ports & {1883, 8883}:
        return DeviceType.IOT
    if 7000 in ports and 3689 in ports:
        return DeviceType.SMART_TV
    if ports & {8291, 8728}:
        return DeviceType.ROUTER
    if 53 in ports and ports & {80, 443}:
        return DeviceType.ROUTER
    if 161 in ports and 80 in ports:
        return DeviceType.SWITCH
    if ports & {445, 548}:
        return DeviceType.DESKTOP
    if ports == {22}:
        return DeviceType.DESKTOP
    return DeviceType.UNKNOWN


def infer_model(vendor: str, device_type: DeviceType) -> str:
    """
    Generic model name for infrastructure devices without a reported model.

    Returns:
        str: Model display name, or "" when nothing sensible can be inferred
    """
    if device_type is DeviceType.ROUTER:
        return ROUTER_MODEL_NAMES.get((vendor or "").lower(), "Router")
    if device_type is DeviceType.SWITCH:
        return "Network Switch"
    if device_type is DeviceType.ACCESS_POINT:
        return "Access Point"
    return ""


def rule_from_dict(data: Dict[str, Any]) -> ClassificationRule:
    """
    Build a rule from a classification.yml entry.

    Raises:
        ValueError: If the entry has no name or an unknown device type
    """
    if not isinstance(data, dict) or not data.get('name'):
        raise ValueError(f"Classification rule needs a name: {data}")

    def _lower_list(key: str) -> List[str]:
        return [str(item).lower() for item in data.get(key) or []]

    return ClassificationRule(
        name=str(data['name']),
        device_type=DeviceType.from_name(str(data.get('device_type', ''))),
        keywords=_lower_list('keywords'),
        prefixes=_lower_list('prefixes'),
        suffixes=_lower_list('suffixes'),
        exact=_lower_list('exact'),
        hostname_keywords=_lower_list('hostname_keywords'),
        use_port_fingerprint=bool(data.get('use_port_fingerprint', False)),
    )


class DeviceClassifier:
    """
    Keyword and port based device classifier.

    Classification order: gateway, hostname rules, vendor rules, open-port
    fingerprint; anything left over is a generic Device.
    """

    def __init__(self, hostname_rules: Optional[List[ClassificationRule]] = None,
                 vendor_rules: Optional[List[ClassificationRule]] = None):
        """Initialize the device classifier with the built-in or given rules."""
        self.hostname_rules = list(DEFAULT_HOSTNAME_RULES if hostname_rules is None else hostname_rules)
        self.vendor_rules = list(DEFAULT_VENDOR_RULES if vendor_rules is None else vendor_rules)
        self.logger = get_logger(__name__)

    @classmethod
    def from_overrides(cls, overrides: Optional[Dict[str, Any]]) -> "DeviceClassifier":
        """
        Build a classifier from ConfigLoader.load_classification_rules() output.

        Invalid entries are skipped with a warning; a table with no valid
        entry keeps its built-in default.
        """
        classifier = cls()
        if not overrides:
            return classifier

        for key in ('hostname_rules', 'vendor_rules'):
            entries = overrides.get(key)
            if not entries:
                continue
            rules = []
            for entry in entries:
                try:
                    rules.append(rule_from_dict(entry))
                except ValueError as e:
                    classifier.logger.warning(f"Skipping classification rule: {e}")
            if rules:
                setattr(classifier, key, rules)
                classifier.logger.debug(f"Loaded {len(rules)} {key.replace('_', ' ')} from configuration")
        return classifier

    def classify(self, hostname: str, vendor: str, is_gateway: bool = False,
                 open_ports: Optional[List[int]] = None) -> DeviceType:
        """
        Classify a device.

        Args:
            hostname: Best known hostname, may be empty
            vendor: Vendor name, may be empty
            is_gateway: True for the default gateway
            open_ports: Open fingerprint ports; None when no port scan was done

        Returns:
            DeviceType: Never UNKNOWN; DEVICE when nothing matched
        """
        if is_gateway:
            return DeviceType.ROUTER

        host_lower = (hostname or "").lower()
        vendor_lower = (vendor or "").lower()

        for rule in self.hostname_rules:
            if rule.matches(host_lower):
                return rule.device_type

        for rule in self.vendor_rules:
            if rule.matches(vendor_lower, host_lower):
                if rule.use_port_fingerprint and open_ports:
                    port_type = classify_by_ports(open_ports)
                    if port_type is not DeviceType.UNKNOWN:
                        return port_type
                return rule.device_type

        port_type = classify_by_ports(open_ports)
        if port_type is not DeviceType.UNKNOWN:
            return port_type
        return DeviceType.DEVICE
