import logging

import lxml.etree as ET
import pytest

import svdmodel
from svdmodel import (
    Access,
    AddressBlockUsage,
    Array,
    BitRange,
    CpuName,
    Device,
    Options,
    RegisterProperties,
    Single,
    StructuralRule,
    SvdContractError,
    SvdLiteralError,
    SvdMissingChildError,
    SvdNestedError,
    SvdParseError,
    SvdStructureError,
)
from svdmodel.bindings import XS_NAMESPACE

DEVICE = """<?xml version="1.0" encoding="utf-8"?>
<device schemaVersion="1.3" xmlns:xs="http://www.w3.org/2001/XMLSchema-instance"
        xs:noNamespaceSchemaLocation="CMSIS-SVD_Schema_1_3.xsd">
  <vendor>Nordic Semiconductor</vendor>
  <vendorID>Nordic</vendorID>
  <name>TESTDEV</name>
  <version>1</version>
  <description>Test device</description>
  <cpu>
    <name>CM33</name>
    <revision>r0p4</revision>
    <endian>little</endian>
    <mpuPresent>1</mpuPresent>
    <fpuPresent>1</fpuPresent>
    <nvicPrioBits>3</nvicPrioBits>
    <vendorSystickConfig>0</vendorSystickConfig>
  </cpu>
  <addressUnitBits>8</addressUnitBits>
  <width>32</width>
  <size>32</size>
  <access>read-write</access>
  <resetValue>0x00000000</resetValue>
  <resetMask>0xFFFFFFFF</resetMask>
  <peripherals>
    <peripheral>
      <name>UART0</name>
      <groupName>UART</groupName>
      <baseAddress>0x40002000</baseAddress>
      <access>write-only</access>
      <addressBlock>
        <offset>0</offset>
        <size>0x1000</size>
        <usage>registers</usage>
      </addressBlock>
      <interrupt>
        <name>UART0</name>
        <value>2</value>
      </interrupt>
      <registers>
        <register>
          <name>TASKS_START</name>
          <addressOffset>0x000</addressOffset>
        </register>
        <cluster>
          <name>PSEL</name>
          <addressOffset>0x500</addressOffset>
          <size>16</size>
          <access>read-only</access>
          <resetValue>0xFFFF</resetValue>
          <register>
            <name>PIN</name>
            <addressOffset>0x0</addressOffset>
          </register>
          <register>
            <name>PORT</name>
            <addressOffset>0x4</addressOffset>
          </register>
        </cluster>
        <register>
          <name>CONFIG</name>
          <addressOffset>0x56C</addressOffset>
          <fields>
            <field>
              <name>HWFC</name>
              <bitRange>[0:0]</bitRange>
            </field>
          </fields>
        </register>
      </registers>
    </peripheral>
    <peripheral derivedFrom="UART0">
      <name>UART1</name>
      <baseAddress>0x40003000</baseAddress>
    </peripheral>
  </peripherals>
</device>
"""


def device_with_peripherals(peripherals):
    return f"""
    <device>
      <name>TESTDEV</name>
      {peripherals}
    </device>
    """.strip()


@pytest.fixture
def device():
    return svdmodel.parse_string(DEVICE)


def test_decode_device(device):
    assert device.schema_version == "1.3"
    assert device.vendor_id == "Nordic"
    assert device.name == "TESTDEV"
    assert device.cpu.name is CpuName.CM33
    assert device.address_unit_bits == 8
    assert device.default_register_properties == RegisterProperties(
        size=32, access=Access.READ_WRITE, reset_value=0, reset_mask=0xFFFFFFFF
    )

    uart0, uart1 = device.peripherals
    assert isinstance(uart0, Single)
    assert uart0.base_address == 0x40002000
    assert uart0.group_name == "UART"
    assert uart0.address_blocks[0].usage is AddressBlockUsage.REGISTER
    assert uart0.interrupts[0].value == 2
    assert [r.name for r in uart0.registers] == ["TASKS_START", "PSEL", "CONFIG"]

    assert uart1.derived_from == "UART0"
    assert uart1.registers == ()


def test_register_properties_inheritance(device):
    tasks_start, psel, config = device.peripherals[0].registers

    assert tasks_start.effective_properties == RegisterProperties(
        size=32, access=Access.WRITE_ONLY, reset_value=0, reset_mask=0xFFFFFFFF
    )
    # Own properties are kept apart from the inherited ones
    assert tasks_start.register_properties == RegisterProperties()

    pin, port = psel.children
    assert pin.effective_properties == RegisterProperties(
        size=16, access=Access.READ_ONLY, reset_value=0xFFFF, reset_mask=0xFFFFFFFF
    )
    assert port.effective_properties == pin.effective_properties

    assert config.fields[0].bit_range == BitRange(offset=0, width=1)


def test_decode_is_deterministic():
    first = svdmodel.parse_string(DEVICE)
    second = svdmodel.parse_string(DEVICE)

    assert first == second
    assert first is not second


def test_round_trip(device):
    assert Device.decode(device.encode()) == device
    assert svdmodel.parse_string(svdmodel.to_string(device)) == device


def test_encode_schema_location(device):
    element = svdmodel.encode_device(device)

    assert element.tag == "device"
    assert element.get("schemaVersion") == "1.3"
    assert (
        element.get(f"{{{XS_NAMESPACE}}}noNamespaceSchemaLocation")
        == "CMSIS-SVD_Schema_1_3.xsd"
    )
    assert element.find("peripherals") is not None


def test_malformed_peripheral():
    svd = device_with_peripherals(
        """
        <peripherals>
          <peripheral>
            <name>GOOD</name>
            <baseAddress>0x1000</baseAddress>
          </peripheral>
          <peripheral>
            <name>BAD</name>
          </peripheral>
        </peripherals>
        """
    )

    with pytest.raises(SvdNestedError) as exc_info:
        svdmodel.parse_string(svd)

    error = exc_info.value
    assert error.element.tag == "peripherals"
    assert error.child.findtext("name") == "BAD"
    assert isinstance(error.root_cause, SvdMissingChildError)
    assert error.root_cause.name == "baseAddress"


def test_nested_error_path():
    svd = device_with_peripherals(
        """
        <peripherals>
          <peripheral>
            <name>UART0</name>
            <baseAddress>0x1000</baseAddress>
            <registers>
              <register>
                <name>CONFIG</name>
                <addressOffset>0</addressOffset>
                <fields>
                  <field>
                    <name>HWFC</name>
                    <bitOffset>zero</bitOffset>
                  </field>
                </fields>
              </register>
            </registers>
          </peripheral>
        </peripherals>
        """
    )

    with pytest.raises(SvdNestedError) as exc_info:
        svdmodel.parse_string(svd)

    path = exc_info.value.path
    assert len(path) == 4
    assert "UART0" in path[0]
    assert "CONFIG" in path[1]
    assert "HWFC" in path[2]
    assert path[3].startswith("[bitOffset")
    assert isinstance(exc_info.value.root_cause, SvdLiteralError)


def test_empty_peripherals_warns(caplog):
    caplog.set_level(logging.WARNING, logger="svdmodel")

    device = svdmodel.parse_string(device_with_peripherals("<peripherals/>"))

    assert device.peripherals == ()
    assert "no peripherals" in caplog.text


def test_empty_peripherals_required():
    options = Options(require_peripherals=True)

    with pytest.raises(SvdStructureError) as exc_info:
        svdmodel.parse_string(device_with_peripherals("<peripherals/>"), options)

    assert exc_info.value.rule is StructuralRule.PERIPHERALS_NOT_EMPTY


def test_missing_peripherals():
    with pytest.raises(SvdMissingChildError) as exc_info:
        svdmodel.parse_string(device_with_peripherals(""))

    assert exc_info.value.name == "peripherals"


def test_unexpected_element_in_peripherals():
    svd = device_with_peripherals("<peripherals><register/></peripherals>")

    with pytest.raises(SvdContractError):
        svdmodel.parse_string(svd)


def test_peripheral_array():
    svd = device_with_peripherals(
        """
        <peripherals>
          <peripheral>
            <name>TIMER%s</name>
            <baseAddress>0x40008000</baseAddress>
            <dim>2</dim>
            <dimIncrement>0x1000</dimIncrement>
          </peripheral>
        </peripherals>
        """
    )

    (timer,) = svdmodel.parse_string(svd).peripherals

    assert isinstance(timer, Array)
    assert list(timer.instances()) == [("TIMER0", 0), ("TIMER1", 0x1000)]


def test_parse_file(tmp_path, device):
    svd_file = tmp_path / "device.svd"
    svd_file.write_text(DEVICE, encoding="utf-8")

    assert svdmodel.parse(svd_file) == device
    assert svdmodel.parse(str(svd_file)) == device


def test_parse_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        svdmodel.parse(tmp_path / "missing.svd")


def test_parse_malformed_xml(tmp_path):
    svd_file = tmp_path / "device.svd"
    svd_file.write_text("<device><name>TESTDEV</name>", encoding="utf-8")

    with pytest.raises(SvdParseError):
        svdmodel.parse(svd_file)

    with pytest.raises(SvdParseError):
        svdmodel.parse_string("<device>")


def test_skip_registers():
    options = Options(skip_registers={"UART[0-9]": ["PSEL.PIN", "CONFIG"]})

    device = svdmodel.parse_string(DEVICE, options)

    tasks_start, psel = device.peripherals[0].registers
    assert tasks_start.name == "TASKS_START"
    assert [r.name for r in psel.children] == ["PORT"]


def test_skip_registers_quoted_name():
    svd = DEVICE.replace("<name>PORT</name>", "<name>PORT'S</name>")
    options = Options(skip_registers={"UART0": ["PSEL.PORT'S"]})

    device = svdmodel.parse_string(svd, options)

    _, psel, _ = device.peripherals[0].registers
    assert [r.name for r in psel.children] == ["PIN"]


def test_keep_comments():
    svd = device_with_peripherals(
        """
        <peripherals>
          <!-- First peripheral -->
          <peripheral>
            <name>GPIO</name>
            <!-- Base address -->
            <baseAddress><!-- GPIO P0 -->0x50000000</baseAddress>
          </peripheral>
        </peripherals>
        """
    )

    device = svdmodel.parse_string(svd, Options(remove_comments=False))

    assert [p.name for p in device.peripherals] == ["GPIO"]
    assert device.peripherals[0].base_address == 0x50000000


def test_decode_device_from_tree():
    root = ET.fromstring(DEVICE.encode("utf-8"))

    device = svdmodel.decode_device(root)

    assert device.name == "TESTDEV"
