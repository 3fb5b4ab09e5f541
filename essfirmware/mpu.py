"""A model of the Cortex-M4 memory protection unit and its simplified setup."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

RBAR_ADDR_POS = 5
RASR_ENABLE_MSK = 0x1
RASR_SIZE_POS = 1
RASR_SIZE_MSK = 0x1F << RASR_SIZE_POS
RASR_B_POS = 16
RASR_AP_POS = 24
RASR_AP_MSK = 0x7 << RASR_AP_POS
RASR_XN_MSK = 0x1 << 28

CTRL_ENABLE = 0x1
CTRL_PRIVDEFENA = 0x4

REGION_COUNT = 8

ENABLE_REGION = 0x1 << 7
EXECUTE_NEVER = 0x1 << 4

_UINT32 = 0xFFFFFFFF


class Permission(IntEnum):
    """Access permissions: privileged access first, unprivileged second."""

    NONE_NONE = 0
    RW_NONE = 1
    RW_R = 2
    RW_RW = 3
    R_NONE = 5
    R_R = 6


@dataclass(frozen=True)
class MpuConfig:
    """One protected region.

    ``permissions`` combines a :class:`Permission` with the
    :data:`EXECUTE_NEVER` and :data:`ENABLE_REGION` flags.  ``size`` is the
    region size as a power of two (10 is 1 KiB); the base address is
    aligned to it.  Each ``priority`` selects its own region slot.
    """

    base_address: int
    permissions: int
    size: int
    priority: int

    def __post_init__(self) -> None:
        if not 0 <= self.base_address <= _UINT32:
            raise ValueError("base address must fit in 32 bits")
        if not 0 <= self.size <= 0xFF:
            raise ValueError("size must fit in one byte")
        if not 0 <= self.priority <= 0xFF:
            raise ValueError("priority must fit in one byte")
        if self.permissions < 0:
            raise ValueError("permissions must not be negative")


STACK_REGION = MpuConfig(
    base_address=0x10000000,
    size=16,
    priority=1,
    permissions=ENABLE_REGION | EXECUTE_NEVER | Permission.RW_RW,
)


def _memory_attributes(base_address: int) -> int:
    """Return the TEX/S/C/B bits recommended for the memory at ``base_address``."""
    if base_address < 0x10000000:
        return 0x2
    if base_address < 0x40000000:
        return 0x6
    if base_address < 0x60000000:
        return 0x5
    return 0x7


def rbar_value(config: MpuConfig) -> int:
    """Return the region base address register value for ``config``."""
    shift = max(config.size, RBAR_ADDR_POS)
    return ((config.base_address >> shift) << shift) & _UINT32


def rasr_value(config: MpuConfig) -> int:
    """Return the region attribute and size register value for ``config``."""
    size_field = config.size - 1 if config.size > 0 else config.size
    value = (
        ((config.permissions << RASR_AP_POS) & (RASR_XN_MSK | RASR_AP_MSK))
        | (_memory_attributes(config.base_address) << RASR_B_POS)
        | ((size_field << RASR_SIZE_POS) & RASR_SIZE_MSK)
        | ((config.permissions >> 7) & RASR_ENABLE_MSK)
    )
    return value & _UINT32


@dataclass
class Mpu:
    """The MPU control, region number and per-region registers."""

    ctrl: int = 0
    rnr: int = 0
    rbar: List[int] = field(default_factory=lambda: [0] * REGION_COUNT)
    rasr: List[int] = field(default_factory=lambda: [0] * REGION_COUNT)

    def enable(self, background_region: bool) -> None:
        """Switch the MPU on, optionally with the default memory map as background."""
        self.ctrl |= (CTRL_PRIVDEFENA if background_region else 0) | CTRL_ENABLE

    def disable(self) -> None:
        """Switch the MPU off."""
        self.ctrl = 0

    def configure(self, config: MpuConfig) -> Tuple[int, int]:
        """Program the region slot chosen by ``config.priority``.

        Returns the (RBAR, RASR) values written.
        """
        self.rnr = config.priority & (REGION_COUNT - 1)
        # the region is disabled first so no half-written setup is ever live
        self.rasr[self.rnr] &= ~RASR_ENABLE_MSK & _UINT32
        self.rbar[self.rnr] = rbar_value(config)
        self.rasr[self.rnr] = rasr_value(config)
        return self.rbar[self.rnr], self.rasr[self.rnr]