"""USB descriptors of the virtual serial (CDC ACM) device."""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import Optional


class DescriptorType(IntEnum):
    """Standard and class-specific descriptor type codes."""

    DEVICE = 0x01
    CONFIGURATION = 0x02
    STRING = 0x03
    INTERFACE = 0x04
    ENDPOINT = 0x05
    CS_INTERFACE = 0x24


NO_DESCRIPTOR = 0
SERIAL_STRING_INDEX = NO_DESCRIPTOR

ENDPOINT_DIR_IN = 0x80
ENDPOINT_DIR_OUT = 0x00

CDC_NOTIFICATION_EPNUM = 1
CDC_TX_EPNUM = 2
CDC_RX_EPNUM = 3
CDC_NOTIFICATION_EPADDR = ENDPOINT_DIR_IN | 1
CDC_TX_EPADDR = ENDPOINT_DIR_IN | 2
CDC_RX_EPADDR = ENDPOINT_DIR_OUT | 3
CDC_NOTIFICATION_EPSIZE = 8
CDC_TXRX_EPSIZE = 64

INTERFACE_ID_CDC_CCI = 0
INTERFACE_ID_CDC_DCI = 1

STRING_ID_LANGUAGE = 0
STRING_ID_MANUFACTURER = 1
STRING_ID_PRODUCT = 2

VENDOR_ID = 0x058B
PRODUCT_ID = 0x0058
ENDPOINT0_SIZE = 64
LANGUAGE_ID_ENG = 0x0409

MANUFACTURER = "Infineon Technologies"
PRODUCT = "IFX CDC"

_CDC_CLASS = 0x02
_CDC_DATA_CLASS = 0x0A
_CDC_NO_SUBCLASS = 0x00
_CDC_ACM_SUBCLASS = 0x02
_CDC_NO_PROTOCOL = 0x00
_CDC_AT_COMMAND_PROTOCOL = 0x01
_CDC_SUBTYPE_HEADER = 0x00
_CDC_SUBTYPE_ACM = 0x02
_CDC_SUBTYPE_UNION = 0x06

_EP_TYPE_BULK = 0x02
_EP_TYPE_INTERRUPT = 0x03

_CONFIG_ATTR_RESERVED = 0x80


def version_bcd(major: int, minor: int, revision: int) -> int:
    """Pack a version number into the binary-coded form USB uses."""
    return ((major & 0xFF) << 8) | ((minor & 0x0F) << 4) | (revision & 0x0F)


def _power_ma(milliamps: int) -> int:
    return milliamps >> 1


def _with_header(kind: DescriptorType, fmt: str, *fields: int) -> bytes:
    body = struct.pack("<" + fmt, *fields)
    return bytes([2 + len(body), kind]) + body


def device_descriptor() -> bytes:
    """Return the device descriptor."""
    return _with_header(
        DescriptorType.DEVICE, "HBBBBHHHBBBB",
        version_bcd(1, 1, 0),
        _CDC_CLASS, _CDC_NO_SUBCLASS, _CDC_NO_PROTOCOL,
        ENDPOINT0_SIZE,
        VENDOR_ID, PRODUCT_ID, version_bcd(0, 1, 0),
        STRING_ID_MANUFACTURER, STRING_ID_PRODUCT, SERIAL_STRING_INDEX,
        1,
    )


def _interface(number: int, endpoints: int, cls: int, subclass: int, protocol: int) -> bytes:
    return _with_header(DescriptorType.INTERFACE, "BBBBBBB",
                        number, 0, endpoints, cls, subclass, protocol, NO_DESCRIPTOR)


def _endpoint(address: int, attributes: int, size: int, interval: int) -> bytes:
    return _with_header(DescriptorType.ENDPOINT, "BBHB", address, attributes, size, interval)


def configuration_descriptor() -> bytes:
    """Return the configuration descriptor with all interfaces and endpoints."""
    body = b"".join([
        _interface(INTERFACE_ID_CDC_CCI, 1, _CDC_CLASS, _CDC_ACM_SUBCLASS,
                   _CDC_AT_COMMAND_PROTOCOL),
        _with_header(DescriptorType.CS_INTERFACE, "BH",
                     _CDC_SUBTYPE_HEADER, version_bcd(1, 1, 0)),
        _with_header(DescriptorType.CS_INTERFACE, "BB", _CDC_SUBTYPE_ACM, 0x06),
        _with_header(DescriptorType.CS_INTERFACE, "BBB", _CDC_SUBTYPE_UNION,
                     INTERFACE_ID_CDC_CCI, INTERFACE_ID_CDC_DCI),
        _endpoint(CDC_NOTIFICATION_EPADDR, _EP_TYPE_INTERRUPT,
                  CDC_NOTIFICATION_EPSIZE, 0xFF),
        _interface(INTERFACE_ID_CDC_DCI, 2, _CDC_DATA_CLASS, _CDC_NO_SUBCLASS,
                   _CDC_NO_PROTOCOL),
        _endpoint(CDC_RX_EPADDR, _EP_TYPE_BULK, CDC_TXRX_EPSIZE, 0x05),
        _endpoint(CDC_TX_EPADDR, _EP_TYPE_BULK, CDC_TXRX_EPSIZE, 0x05),
    ])
    header_len = 9
    header = _with_header(
        DescriptorType.CONFIGURATION, "HBBBBB",
        header_len + len(body), 2, 1, NO_DESCRIPTOR,
        _CONFIG_ATTR_RESERVED, _power_ma(100),
    )
    return header + body


def string_descriptor(text: str) -> bytes:
    """Return a string descriptor holding ``text`` in UTF-16LE."""
    encoded = text.encode("utf-16-le")
    if 2 + len(encoded) > 0xFF:
        raise ValueError("string too long for a descriptor")
    return bytes([2 + len(encoded), DescriptorType.STRING]) + encoded


def language_descriptor() -> bytes:
    """Return string descriptor zero, listing the supported language."""
    return _with_header(DescriptorType.STRING, "H", LANGUAGE_ID_ENG)


def get_descriptor(w_value: int, w_index: int) -> Optional[bytes]:
    """Answer a Get Descriptor request; ``None`` when there is no such descriptor."""
    kind = (w_value >> 8) & 0xFF
    number = w_value & 0xFF
    if kind == DescriptorType.DEVICE:
        return device_descriptor()
    if kind == DescriptorType.CONFIGURATION:
        return configuration_descriptor()
    if kind == DescriptorType.STRING:
        if number == STRING_ID_LANGUAGE:
            return language_descriptor()
        if number == STRING_ID_MANUFACTURER:
            return string_descriptor(MANUFACTURER)
        if number == STRING_ID_PRODUCT:
            return string_descriptor(PRODUCT)
    return None