import pytest

from essfirmware.mpu import (
    CTRL_ENABLE,
    CTRL_PRIVDEFENA,
    ENABLE_REGION,
    EXECUTE_NEVER,
    RASR_ENABLE_MSK,
    RASR_XN_MSK,
    STACK_REGION,
    Mpu,
    MpuConfig,
    Permission,
    rasr_value,
    rbar_value,
)


def test_stack_region_register_values():
    assert rbar_value(STACK_REGION) == 0x10000000
    assert rasr_value(STACK_REGION) == 0x1306001F


@pytest.mark.parametrize("size", [0, 3, 5, 10, 16, 20, 31])
def test_rbar_is_aligned_and_not_above_base(size):
    config = MpuConfig(base_address=0x2000ABCD, permissions=0, size=size, priority=0)
    value = rbar_value(config)
    assert value % (1 << max(size, 5)) == 0
    assert value <= config.base_address
    assert config.base_address - value < (1 << max(size, 5))


def test_rbar_keeps_already_aligned_address():
    config = MpuConfig(base_address=0x20000000, permissions=0, size=12, priority=0)
    assert rbar_value(config) == 0x20000000


@pytest.mark.parametrize("flag", [0, ENABLE_REGION])
def test_enable_bit_follows_permission_flag(flag):
    config = MpuConfig(base_address=0, permissions=flag | Permission.RW_RW, size=10, priority=0)
    assert bool(rasr_value(config) & RASR_ENABLE_MSK) == bool(flag)


@pytest.mark.parametrize("flag", [0, EXECUTE_NEVER])
def test_execute_never_bit(flag):
    config = MpuConfig(base_address=0, permissions=flag | Permission.R_R, size=10, priority=0)
    assert bool(rasr_value(config) & RASR_XN_MSK) == bool(flag)


@pytest.mark.parametrize("permission", list(Permission))
def test_access_permission_field(permission):
    config = MpuConfig(base_address=0, permissions=int(permission), size=10, priority=0)
    assert (rasr_value(config) >> 24) & 0x7 == permission


@pytest.mark.parametrize("size", [1, 5, 10, 16, 32])
def test_size_field_is_one_less(size):
    config = MpuConfig(base_address=0, permissions=0, size=size, priority=0)
    assert (rasr_value(config) >> 1) & 0x1F == size - 1


def test_size_zero_stays_zero():
    config = MpuConfig(base_address=0, permissions=0, size=0, priority=0)
    assert (rasr_value(config) >> 1) & 0x1F == 0


@pytest.mark.parametrize(
    "address, attributes",
    [(0x00000000, 0x2), (0x0C000000, 0x2), (0x10000000, 0x6), (0x20000000, 0x6),
     (0x40000000, 0x5), (0x50000000, 0x5), (0x60000000, 0x7), (0xE0000000, 0x7)],
)
def test_memory_attributes_by_address(address, attributes):
    config = MpuConfig(base_address=address, permissions=0, size=10, priority=0)
    assert (rasr_value(config) >> 16) & 0x7 == attributes


def test_enable_without_background():
    mpu = Mpu()
    mpu.enable(False)
    assert mpu.ctrl == CTRL_ENABLE


def test_enable_with_background():
    mpu = Mpu()
    mpu.enable(True)
    assert mpu.ctrl == CTRL_ENABLE | CTRL_PRIVDEFENA


def test_enable_keeps_existing_bits():
    mpu = Mpu()
    mpu.enable(True)
    mpu.enable(False)
    assert mpu.ctrl == CTRL_ENABLE | CTRL_PRIVDEFENA


def test_disable_clears_control():
    mpu = Mpu()
    mpu.enable(True)
    mpu.disable()
    assert mpu.ctrl == 0


def test_configure_writes_selected_region():
    mpu = Mpu()
    written = mpu.configure(STACK_REGION)
    assert mpu.rnr == STACK_REGION.priority
    assert written == (rbar_value(STACK_REGION), rasr_value(STACK_REGION))
    assert mpu.rbar[1] == rbar_value(STACK_REGION)
    assert mpu.rasr[1] == rasr_value(STACK_REGION)
    assert mpu.rasr[0] == 0


def test_configure_wraps_priority_to_region_slot():
    mpu = Mpu()
    config = MpuConfig(base_address=0x08000000, permissions=ENABLE_REGION, size=20, priority=9)
    mpu.configure(config)
    assert mpu.rnr == 1
    assert mpu.rasr[1] == rasr_value(config)


def test_reconfigure_with_disabled_region():
    mpu = Mpu()
    mpu.configure(STACK_REGION)
    disabled = MpuConfig(base_address=0x10000000, permissions=Permission.RW_RW, size=16, priority=1)
    mpu.configure(disabled)
    assert mpu.rasr[1] & RASR_ENABLE_MSK == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(base_address=-1, permissions=0, size=10, priority=0),
        dict(base_address=1 << 32, permissions=0, size=10, priority=0),
        dict(base_address=0, permissions=0, size=256, priority=0),
        dict(base_address=0, permissions=0, size=10, priority=256),
        dict(base_address=0, permissions=-1, size=10, priority=0),
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        MpuConfig(**kwargs)