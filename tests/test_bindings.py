import lxml.etree as ET
import pytest

from svdmodel import (
    Access,
    BitRange,
    ClusterInfo,
    Cpu,
    CpuName,
    Endian,
    EnumeratedValue,
    EnumeratedValues,
    EnumUsage,
    Field,
    Interrupt,
    Protection,
    RegisterProperties,
    StructuralRule,
    SvdContractError,
    SvdLiteralError,
    SvdMissingChildError,
    SvdNestedError,
    SvdStructureError,
    WriteAction,
    WriteConstraint,
    WriteConstraintKind,
    WriteConstraintRange,
)
from svdmodel._elements import get_child_as
from svdmodel.bindings import BINDING_REGISTRY, BINDINGS

INTERRUPT = """
<interrupt>
    <name>UART0</name>
    <description>UART 0</description>
    <value>2</value>
</interrupt>
"""

CPU = """
<cpu>
    <name>cm33</name>
    <revision>r0p4</revision>
    <endian>little</endian>
    <mpuPresent>1</mpuPresent>
    <fpuPresent>true</fpuPresent>
    <fpuDP>false</fpuDP>
    <nvicPrioBits>3</nvicPrioBits>
    <vendorSystickConfig>0</vendorSystickConfig>
    <deviceNumInterrupts>0x45</deviceNumInterrupts>
</cpu>
"""

FIELD = """
<field derivedFrom="OTHER">
    <name>MODE</name>
    <description>Operating mode</description>
    <lsb>4</lsb>
    <msb>7</msb>
    <access>READ-WRITE</access>
    <modifiedWriteValues>oneToClear</modifiedWriteValues>
    <writeConstraint>
        <useEnumeratedValues>true</useEnumeratedValues>
    </writeConstraint>
    <enumeratedValues>
        <name>MODE_ENUM</name>
        <usage>read-write</usage>
        <enumeratedValue>
            <name>Off</name>
            <value>#0000</value>
        </enumeratedValue>
        <enumeratedValue>
            <name>On</name>
            <value>#1x1x</value>
        </enumeratedValue>
        <enumeratedValue>
            <name>Other</name>
            <isDefault>true</isDefault>
        </enumeratedValue>
    </enumeratedValues>
</field>
"""


def xml(text):
    return ET.fromstring(text)


def test_decode_interrupt():
    interrupt = Interrupt.decode(xml(INTERRUPT))

    assert interrupt == Interrupt(name="UART0", description="UART 0", value=2)


def test_decode_wrong_tag():
    with pytest.raises(SvdContractError):
        Interrupt.decode(xml("<cluster><name>A</name><value>1</value></cluster>"))


def test_decode_missing_required_child():
    with pytest.raises(SvdMissingChildError) as exc_info:
        Interrupt.decode(xml("<interrupt><name>A</name></interrupt>"))

    assert exc_info.value.name == "value"
    assert exc_info.value.element.tag == "interrupt"


def test_decode_optional_child_absent():
    interrupt = Interrupt.decode(xml("<interrupt><name>A</name><value>1</value></interrupt>"))

    assert interrupt.description is None


def test_decode_invalid_literal_is_nested():
    with pytest.raises(SvdNestedError) as exc_info:
        Interrupt.decode(xml("<interrupt><name>A</name><value>abc</value></interrupt>"))

    assert exc_info.value.element.tag == "interrupt"
    assert exc_info.value.child.tag == "value"
    assert isinstance(exc_info.value.__cause__, SvdLiteralError)
    assert exc_info.value.__cause__.text == "abc"


def test_entities_are_immutable():
    interrupt = Interrupt.decode(xml(INTERRUPT))

    with pytest.raises(AttributeError):
        interrupt.value = 3  # type: ignore


def test_get_child_as_with_binding():
    parent = xml(f"<device>{CPU}</device>")

    cpu = get_child_as("cpu", parent, Cpu.decode)

    assert cpu.name is CpuName.CM33
    assert cpu.endian is Endian.LITTLE
    assert cpu.mpu_present is True
    assert cpu.fpu_present is True
    assert cpu.fpu_double_precision is False
    assert cpu.dsp_present is None
    assert cpu.nvic_priority_bits == 3
    assert cpu.has_vendor_systick is False
    assert cpu.device_num_interrupts == 0x45


def test_invalid_enum_literal():
    with pytest.raises(SvdNestedError) as exc_info:
        Cpu.decode(xml(CPU.replace("<endian>little</endian>", "<endian>middle</endian>")))

    cause = exc_info.value.__cause__
    assert isinstance(cause, SvdLiteralError)
    assert cause.expected == "Endian"
    assert cause.text == "middle"


def test_decode_field():
    field = Field.decode(xml(FIELD))

    assert field.derived_from == "OTHER"
    assert field.name == "MODE"
    assert field.bit_range == BitRange(offset=4, width=4)
    assert field.bit_range.msb == 7
    assert field.access is Access.READ_WRITE
    assert field.modified_write_values is WriteAction.ONE_TO_CLEAR
    assert field.write_constraint.kind is WriteConstraintKind.USE_ENUMERATED_VALUES
    assert field.read_action is None

    (enumeration,) = field.enumerated_values
    assert enumeration.name == "MODE_ENUM"
    assert enumeration.usage is EnumUsage.READ_WRITE
    assert [v.name for v in enumeration.values] == ["Off", "On", "Other"]
    assert enumeration.values[1].value == 0b1010
    assert enumeration.values[2].is_default is True
    assert enumeration.values[2].value is None


def test_field_round_trip():
    field = Field.decode(xml(FIELD))

    element = field.encode()

    assert element.tag == "field"
    assert element.get("derivedFrom") == "OTHER"
    assert element.findtext("bitOffset") == "4"
    assert element.findtext("bitWidth") == "4"
    assert Field.decode(element) == field


@pytest.mark.parametrize(
    "bits, expected",
    [
        ("<lsb>0</lsb><msb>31</msb>", BitRange(offset=0, width=32)),
        ("<bitOffset>3</bitOffset><bitWidth>2</bitWidth>", BitRange(offset=3, width=2)),
        ("<bitOffset>3</bitOffset>", BitRange(offset=3, width=32)),
        ("<bitRange>[7:4]</bitRange>", BitRange(offset=4, width=4)),
        ("<bitRange>[0:0]</bitRange>", BitRange(offset=0, width=1)),
    ],
)
def test_field_bit_range_styles(bits, expected):
    field = Field.decode(xml(f"<field><name>F</name>{bits}</field>"))

    assert field.bit_range == expected


def test_field_bit_range_missing():
    with pytest.raises(SvdMissingChildError) as exc_info:
        Field.decode(xml("<field><name>F</name></field>"))

    assert exc_info.value.name == "bitOffset"


def test_field_bit_range_inverted():
    with pytest.raises(SvdStructureError) as exc_info:
        Field.decode(xml("<field><name>F</name><bitRange>[2:5]</bitRange></field>"))

    assert exc_info.value.rule is StructuralRule.BIT_RANGE_ORDER


def test_field_bit_range_malformed():
    with pytest.raises(SvdNestedError) as exc_info:
        Field.decode(xml("<field><name>F</name><bitRange>7:4</bitRange></field>"))

    assert isinstance(exc_info.value.__cause__, SvdLiteralError)


def test_write_constraint_range():
    constraint = WriteConstraint.decode(
        xml(
            "<writeConstraint><range><minimum>0</minimum><maximum>0x7</maximum></range>"
            "</writeConstraint>"
        )
    )

    assert constraint.kind is WriteConstraintKind.RANGE
    assert constraint.value_range == WriteConstraintRange(minimum=0, maximum=7)


@pytest.mark.parametrize(
    "content",
    [
        "",
        "<writeAsRead>true</writeAsRead><useEnumeratedValues>true</useEnumeratedValues>",
    ],
)
def test_write_constraint_choice(content):
    with pytest.raises(SvdStructureError) as exc_info:
        WriteConstraint.decode(xml(f"<writeConstraint>{content}</writeConstraint>"))

    assert exc_info.value.rule is StructuralRule.WRITE_CONSTRAINT_CHOICE


@pytest.mark.parametrize(
    "content",
    [
        "<name>A</name>",
        "<name>A</name><value>1</value><isDefault>true</isDefault>",
    ],
)
def test_enumerated_value_choice(content):
    with pytest.raises(SvdStructureError) as exc_info:
        EnumeratedValue.decode(xml(f"<enumeratedValue>{content}</enumeratedValue>"))

    assert exc_info.value.rule is StructuralRule.ENUMERATED_VALUE_CHOICE


def test_enumeration_not_empty():
    with pytest.raises(SvdStructureError) as exc_info:
        EnumeratedValues.decode(xml("<enumeratedValues><name>E</name></enumeratedValues>"))

    assert exc_info.value.rule is StructuralRule.ENUMERATION_NOT_EMPTY


def test_derived_enumeration_may_be_empty():
    enumeration = EnumeratedValues.decode(xml('<enumeratedValues derivedFrom="E"/>'))

    assert enumeration.derived_from == "E"
    assert enumeration.values == ()


def test_register_properties_inherit():
    base = RegisterProperties(
        size=32, access=Access.READ_WRITE, reset_value=0, reset_mask=0xFFFFFFFF
    )
    own = RegisterProperties(size=16, protection=Protection.SECURE)

    inherited = own.inherit(base)

    assert inherited == RegisterProperties(
        size=16,
        access=Access.READ_WRITE,
        protection=Protection.SECURE,
        reset_value=0,
        reset_mask=0xFFFFFFFF,
    )
    assert inherited.is_full
    assert not own.is_full
    assert own.inherit(None) is own


def test_register_properties_group_encode():
    props = RegisterProperties(size=8, access=Access.READ_ONLY)

    element = props.encode("register")

    assert [child.tag for child in element] == ["size", "access"]
    assert element.findtext("access") == "read-only"


def test_binding_registry():
    assert BINDING_REGISTRY.lookup("cluster") is ClusterInfo
    assert Interrupt in BINDING_REGISTRY.bindings
    assert Interrupt in BINDINGS

    with pytest.raises(SvdContractError):
        BINDING_REGISTRY.lookup("nothing")
