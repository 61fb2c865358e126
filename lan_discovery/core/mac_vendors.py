"""
MAC address vendor lookup.

OUI_VENDORS maps the first three bytes of a MAC address (six upper-case hex
characters) to a vendor display name. The table is read-only; lookups are a
single dict access.
"""

from typing import Optional

OUI_VENDORS = {
    # Microsoft
    "00155D": "Microsoft",
    "001DD8": "Microsoft",
    "0003FF": "Microsoft",
    "7CED8D": "Microsoft",

    # VMware
    "000C29": "VMware",
    "005056": "VMware",

    # Parallels
    "001C42": "Parallels",

    # VirtualBox
    "080027": "VirtualBox",

    # Xensource
    "00163E": "Xensource",

    # Google
    "001A11": "Google",
    "3C5AB4": "Google",
    "94EB2C": "Google",
    "F4F5D8": "Google",
    "A47733": "Google",

    # Apple
    "DC56E7": "Apple",
    "F0D4F7": "Apple",
    "A860B6": "Apple",
    "3C0754": "Apple",
    "F8FF0B": "Apple",
    "A4B197": "Apple",
    "98D6BB": "Apple",
    "F0B479": "Apple",
    "A4D1D2": "Apple",
    "002312": "Apple",
    "B8E856": "Apple",
    "60F81D": "Apple",
    "BC6778": "Apple",
    "88E9FE": "Apple",
    "B8C111": "Apple",
    "E0B9BA": "Apple",
    "F0DCE2": "Apple",
    "18AF8F": "Apple",

    # TP-Link
    "B0BE76": "TP-Link",
    "001DD9": "TP-Link",
    "14CC20": "TP-Link",
    "1C3BF3": "TP-Link",
    "30B5C2": "TP-Link",
    "503EAA": "TP-Link",
    "54E6FC": "TP-Link",
    "6466B3": "TP-Link",
    "788CB5": "TP-Link",
    "9C216A": "TP-Link",
    "C025E9": "TP-Link",
    "D46E0E": "TP-Link",
    "E894F6": "TP-Link",
    "F4F26D": "TP-Link",

    # Realtek
    "00E04C": "Realtek",

    # Dell
    "001E4F": "Dell",
    "F8BC12": "Dell",
    "D4BED9": "Dell",

    # Intel
    "28C63F": "Intel",
    "3C970E": "Intel",
    "A4C494": "Intel",
    "48A472": "Intel",
    "8C8CAA": "Intel",
    "E8B1FC": "Intel",
    "001B21": "Intel",
    "001E67": "Intel",
    "0024D6": "Intel",
    "5CE0C5": "Intel",
    "606720": "Intel",
    "6C8814": "Intel",
    "88B111": "Intel",
    "B4B52F": "Intel",
    "C8D3FF": "Intel",
    "E4A7A0": "Intel",
    "F8F21E": "Intel",
    "001E65": "Intel",
    "001F3B": "Intel",
    "002314": "Intel",
    "00248C": "Intel",
    "0026C6": "Intel",
    "0026C7": "Intel",
    "B49691": "Intel",

    # Cisco
    "002710": "Cisco",
    "001217": "Cisco",
    "0012D9": "Cisco",
    "001320": "Cisco",
    "001795": "Cisco",
    "001A2F": "Cisco",
    "001A6C": "Cisco",
    "001B0C": "Cisco",
    "001B2A": "Cisco",
    "001B53": "Cisco",
    "001B54": "Cisco",
    "001B67": "Cisco",
    "001BD4": "Cisco",
    "001BD5": "Cisco",
    "001BD7": "Cisco",
    "001C0E": "Cisco",
    "001C0F": "Cisco",
    "001C10": "Cisco",
    "001C57": "Cisco",
    "001C58": "Cisco",
    "001D45": "Cisco",
    "001D46": "Cisco",
    "001D70": "Cisco",
    "001D71": "Cisco",
    "001DE5": "Cisco",
    "001DE6": "Cisco",
    "001E13": "Cisco",
    "001E14": "Cisco",
    "001E49": "Cisco",
    "001E4A": "Cisco",
    "001E79": "Cisco",
    "001E7A": "Cisco",
    "001EB6": "Cisco",
    "001EB7": "Cisco",
    "001EBD": "Cisco",
    "001EBE": "Cisco",
    "001EF6": "Cisco",
    "001EF7": "Cisco",
    "001F26": "Cisco",
    "001F27": "Cisco",
    "001F6C": "Cisco",
    "001F6D": "Cisco",
    "001F9D": "Cisco",
    "001F9E": "Cisco",
    "001FC9": "Cisco",
    "001FCA": "Cisco",
    "002155": "Cisco",
    "002156": "Cisco",
    "0021A0": "Cisco",
    "0021A1": "Cisco",
    "0021BE": "Cisco",
    "0021BF": "Cisco",
    "0021D7": "Cisco",
    "0021D8": "Cisco",
    "002216": "Cisco",
    "00223A": "Cisco",
    "00226B": "Cisco",
    "002290": "Cisco",
    "0022BD": "Cisco",
    "0022CE": "Cisco",
    "002351": "Cisco",
    "00235D": "Cisco",
    "002398": "Cisco",
    "0023AB": "Cisco",
    "0023AC": "Cisco",
    "0023BE": "Cisco",
    "0023EA": "Cisco",
    "0023EB": "Cisco",
    "002433": "Cisco",
    "002434": "Cisco",
    "00244A": "Cisco",
    "002450": "Cisco",
    "002451": "Cisco",
    "00248A": "Cisco",
    "0024C3": "Cisco",
    "0024C4": "Cisco",
    "0024F7": "Cisco",
    "0024F9": "Cisco",
    "002511": "Cisco",
    "002512": "Cisco",
    "002545": "Cisco",
    "002546": "Cisco",
    "00259A": "Cisco",
    "00259B": "Cisco",
    "0025B4": "Cisco",
    "0025B5": "Cisco",
    "002643": "Cisco",
    "002644": "Cisco",
    "00268B": "Cisco",
    "00270D": "Cisco",
    "00271A": "Cisco",
    "00271B": "Cisco",
    "00272F": "Cisco",
    "002730": "Cisco",
    "0050E2": "Cisco",
    "0050F0": "Cisco",
    "005080": "Cisco",
    "00503E": "Cisco",
    "005054": "Cisco",
    "0050A2": "Cisco",
    "0050BD": "Cisco",
    "0060B9": "Cisco",
    "006009": "Cisco",
    "006047": "Cisco",
    "006070": "Cisco",
    "006083": "Cisco",
    "0090A6": "Cisco",
    "0090BF": "Cisco",
    "0090F2": "Cisco",
    "00D006": "Cisco",
    "00D058": "Cisco",
    "00D079": "Cisco",
    "00D0BA": "Cisco",
    "00D0BB": "Cisco",
    "00D0BC": "Cisco",
    "00D0C0": "Cisco",
    "00D0D3": "Cisco",
    "00D0E4": "Cisco",
    "00D0FF": "Cisco",
    "00E014": "Cisco",
    "00E016": "Cisco",
    "00E01E": "Cisco",
    "00E034": "Cisco",
    "00E04F": "Cisco",
    "00E08F": "Cisco",
    "00E0A3": "Cisco",
    "00E0B0": "Cisco",
    "00E0F7": "Cisco",
    "00E0F9": "Cisco",
    "00E0FE": "Cisco",
    "0C8525": "Cisco",
    "0C8DDB": "Cisco",
    "0CD996": "Cisco",
    "0CDFA4": "Cisco",
    "0CE0E4": "Cisco",

    # Huawei
    "5C5181": "Huawei",
    "00E0FC": "Huawei",
    "48435A": "Huawei",
    "707BE8": "Huawei",
    "7C1E52": "Huawei",
    "84A9C4": "Huawei",
    "88CEFA": "Huawei",
    "C8D15E": "Huawei",
    "E0247F": "Huawei",
    "F4C714": "Huawei",
    "F83DFF": "Huawei",
    "FC48EF": "Huawei",

    # Samsung
    "001E10": "Samsung",
    "002339": "Samsung",
    "0024E9": "Samsung",
    "0026E2": "Samsung",
    "1C62B8": "Samsung",
    "5056BF": "Samsung",
    "5C0A5B": "Samsung",
    "6C2F2C": "Samsung",
    "78D6F0": "Samsung",
    "84119E": "Samsung",
    "8C71F8": "Samsung",
    "9463D1": "Samsung",
    "9C65B0": "Samsung",
    "A0B4A5": "Samsung",
    "B47443": "Samsung",
    "C44619": "Samsung",
    "D0176A": "Samsung",
    "E4E0C5": "Samsung",
    "F025B7": "Samsung",
    "F8042E": "Samsung",

    # Xiaomi
    "001A2B": "Xiaomi",
    "0C1DAF": "Xiaomi",
    "10D07A": "Xiaomi",
    "14F65A": "Xiaomi",
    "286C07": "Xiaomi",
    "34CE00": "Xiaomi",
    "3C9157": "Xiaomi",
    "50EC50": "Xiaomi",
    "58448E": "Xiaomi",
    "640980": "Xiaomi",
    "7451BA": "Xiaomi",
    "7C1DD9": "Xiaomi",
    "842E27": "Xiaomi",
    "8CBEBE": "Xiaomi",
    "9C99A0": "Xiaomi",
    "A086C6": "Xiaomi",
    "B0E235": "Xiaomi",
    "C40BCB": "Xiaomi",
    "D4970B": "Xiaomi",
    "E8FA23": "Xiaomi",
    "F48B32": "Xiaomi",
    "F8A45F": "Xiaomi",

    # D-Link
    "001E58": "D-Link",
    "0015E9": "D-Link",
    "00179A": "D-Link",
    "001CF0": "D-Link",
    "0022B0": "D-Link",
    "00265A": "D-Link",
    "1CAFF7": "D-Link",
    "1CBDB9": "D-Link",
    "28107B": "D-Link",
    "340804": "D-Link",
    "78542E": "D-Link",
    "9094E4": "D-Link",
    "ACF1DF": "D-Link",
    "B8A386": "D-Link",
    "C8BE19": "D-Link",
    "CCB255": "D-Link",
    "F07D68": "D-Link",
    "FC7516": "D-Link",

    # Netgear
    "001802": "Netgear",
    "00184D": "Netgear",
    "001E2A": "Netgear",
    "001F33": "Netgear",
    "00223F": "Netgear",
    "00224D": "Netgear",
    "002636": "Netgear",
    "00265B": "Netgear",
    "008EF2": "Netgear",
    "204E7F": "Netgear",
    "2CB05D": "Netgear",
    "4494FC": "Netgear",
    "6CB0CE": "Netgear",
    "84C9B2": "Netgear",
    "9CD36D": "Netgear",
    "A00460": "Netgear",
    "A42B8C": "Netgear",
    "B03956": "Netgear",
    "C03F0E": "Netgear",
    "C43DC7": "Netgear",
    "CC40D0": "Netgear",
    "E0469A": "Netgear",
    "E091F5": "Netgear",
    "E4F4C6": "Netgear",
    "2C3033": "Netgear",

    # ASUS
    "001AA0": "ASUS",
    "001FC6": "ASUS",
    "002354": "ASUS",
    "00248D": "ASUS",
    "049226": "ASUS",
    "08606E": "ASUS",
    "107B44": "ASUS",
    "14DDA9": "ASUS",
    "1C872C": "ASUS",
    "2C4D54": "ASUS",
    "2CFDA1": "ASUS",
    "305A3A": "ASUS",
    "3085A9": "ASUS",
    "382C4A": "ASUS",
    "485B39": "ASUS",
    "50465D": "ASUS",
    "54A050": "ASUS",
    "6045CB": "ASUS",
    "708BCD": "ASUS",
    "74D02B": "ASUS",
    "AC220B": "ASUS",
    "BCEE7B": "ASUS",
    "C86000": "ASUS",
    "D850E6": "ASUS",
    "E03F49": "ASUS",
    "F46D04": "ASUS",
    "F832E4": "ASUS",

    # Raspberry Pi
    "B827EB": "Raspberry Pi",
    "DCA632": "Raspberry Pi",
    "E45F01": "Raspberry Pi",

    # QEMU/KVM
    "525400": "QEMU/KVM",

    # Synology
    "001132": "Synology",

    # QNAP
    "00089B": "QNAP",

    # Ubiquiti
    "00156D": "Ubiquiti",
    "002722": "Ubiquiti",
    "0418D6": "Ubiquiti",
    "18E829": "Ubiquiti",
    "245A4C": "Ubiquiti",
    "24A43C": "Ubiquiti",
    "44D9E7": "Ubiquiti",
    "687251": "Ubiquiti",
    "68D79A": "Ubiquiti",
    "74ACB9": "Ubiquiti",
    "784558": "Ubiquiti",
    "788A20": "Ubiquiti",
    "802AA8": "Ubiquiti",
    "B4FBE4": "Ubiquiti",
    "DC9FDB": "Ubiquiti",
    "E063DA": "Ubiquiti",
    "F09FC2": "Ubiquiti",
    "FCECDA": "Ubiquiti",

    # Espressif
    "18FE34": "Espressif",
    "240AC4": "Espressif",
    "24B2DE": "Espressif",
    "30AEA4": "Espressif",
    "3C71BF": "Espressif",
    "5CCF7F": "Espressif",
    "84F3EB": "Espressif",
    "A4CF12": "Espressif",
    "BCDDC2": "Espressif",
    "CC50E3": "Espressif",
}


def oui_prefix(mac_address: Optional[str]) -> str:
    """Return the six hex character OUI of a MAC address, or "" if too short."""
    if not mac_address:
        return ""
    digits = "".join(ch for ch in mac_address if ch not in ":-. ").upper()
    return digits[:6] if len(digits) >= 6 else ""


def lookup_vendor(mac_address: Optional[str]) -> str:
    """
    Resolve the vendor name for a MAC address.

    Args:
        mac_address: MAC in any common notation (colons, dashes, dots)

    Returns:
        str: Vendor name, or "" when the prefix is unknown
    """
    return OUI_VENDORS.get(oui_prefix(mac_address), "")
