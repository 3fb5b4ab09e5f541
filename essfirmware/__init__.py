"""Host-side model of a serial encryption service and its board helpers."""

__version__ = "0.1.0"

__all__ = [
    "base64url",
    "crypto",
    "packetizer",
    "morse",
    "mpu",
    "descriptors",
    "rng",
    "service",
]