# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Typed, immutable Python representation of the SVD format.
Each type of element in the SVD XML tree is represented by a class in this module.
The class fields correspond more or less directly to the XML elements/attributes,
with some abstractions and simplifications added for convenience.

Based on CMSIS-SVD schema v1.3.9.
"""

from __future__ import annotations

import dataclasses as dc
import enum
from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    Generic,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

import lxml.etree as ET
from typing_extensions import Self

import svdmodel

from ._bindings import (
    BOOL,
    DIM_INDEX,
    HEX,
    INT,
    STRING,
    Binding,
    BindingRegistry,
    CaseInsensitiveStrEnum,
    Defaults,
    attr,
    children,
    elem,
    enum_codec,
    group,
    spec,
)
from ._elements import check_tag, get_text, has_child, merge_elements, optional_child_as
from .errors import SvdLiteralError, SvdMissingChildError, SvdStructureError, StructuralRule
from .literals import parse_digits

# Container for the SVD element classes.
BINDING_REGISTRY = BindingRegistry()

# Alias for the BINDING_REGISTRY.add for convenience.
binding = BINDING_REGISTRY.add

# Alias for the BINDING_REGISTRY.bindings for convenience.
BINDINGS = BINDING_REGISTRY.bindings

# Namespace used for the schema location attribute of the device element.
XS_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


@enum.unique
class Access(CaseInsensitiveStrEnum):
    """
    Access rights for a given register or field.
    See "accessType" in the SVD schema.
    """

    # Read access is permitted. Write operations have an undefined result.
    READ_ONLY = "read-only"
    # Write access is permitted. Read operations have an undefined result.
    WRITE_ONLY = "write-only"
    # Read and write accesses are permitted.
    READ_WRITE = "read-write"
    # Only the first write after reset has an effect. Read operations have an undefined results.
    WRITE_ONCE = "writeOnce"
    # Only the first write after reset has an effect. Read access is permitted.
    READ_WRITE_ONCE = "read-writeOnce"


@enum.unique
class ReadAction(CaseInsensitiveStrEnum):
    """
    Side effect following a read operation of a given register or field.
    See "readActionType" in the SVD schema.
    """

    # The register/field is set to zero following a read operation.
    CLEAR = "clear"
    # The register/field is set to ones following a read operation.
    SET = "set"
    # The register/field is modified by a read operation.
    MODIFY = "modify"
    # A dependent resource is modified by a read operation.
    MODIFY_EXTERNAL = "modifyExternal"


@enum.unique
class Endian(CaseInsensitiveStrEnum):
    """
    Processor endianness.
    See "endianType" in the SVD schema.
    """

    LITTLE = "little"
    BIG = "big"
    # Endianness is configurable for the device, taking effect on the next reset.
    SELECTABLE = "selectable"
    # Neither big nor little endian
    OTHER = "other"


@enum.unique
class AddressBlockUsage(CaseInsensitiveStrEnum):
    """
    Defined usage type of a peripheral address block.
    See "addressBlockType" in the SVD schema.
    """

    REGISTER = "registers"
    BUFFER = "buffer"
    RESERVED = "reserved"


@enum.unique
class Protection(CaseInsensitiveStrEnum):
    """
    Security privilege required to access an address region.
    See "protectionStringType" in the SVD schema.
    """

    # Secure permission required for access
    SECURE = "s"
    # Non-secure or secure permission required for access
    NON_SECURE = "n"
    # Privileged permission required for access
    PRIVILEGED = "p"


@enum.unique
class EnumUsage(CaseInsensitiveStrEnum):
    """
    Usage of an enumerated value.
    See "enumUsageType" in the SVD schema.
    """

    READ = "read"
    WRITE = "write"
    READ_WRITE = "read-write"


@enum.unique
class WriteAction(CaseInsensitiveStrEnum):
    """
    Side effect following a write operation of a given register or field.
    See "modifiedWriteValuesType" in the SVD schema.
    """

    # Bits written to one are set to zero in the register/field.
    ONE_TO_CLEAR = "oneToClear"
    # Bits written to one are set to one in the register/field.
    ONE_TO_SET = "oneToSet"
    # Bits written to one are inverted in the register/field.
    ONE_TO_TOGGLE = "oneToToggle"
    # Bits written to zero are set to zero in the register/field.
    ZERO_TO_CLEAR = "zeroToClear"
    # Bits written to zero are set to one in the register/field.
    ZERO_TO_SET = "zeroToSet"
    # Bits written to zero are inverted in the register/field.
    ZERO_TO_TOGGLE = "zeroToToggle"
    # All bits are set to zero on writing to the register/field.
    CLEAR = "clear"
    # All bits are set to one on writing to the register/field.
    SET = "set"
    # All bits are modified on writing to the register/field.
    MODIFY = "modify"


@enum.unique
class DataType(CaseInsensitiveStrEnum):
    """
    Data types defined in the SVD specification.
    See "dataTypeType" in the SVD schema.
    """

    UINT8_T = "uint8_t"
    UINT16_T = "uint16_t"
    UINT32_T = "uint32_t"
    UINT64_T = "uint64_t"
    INT8_T = "int8_t"
    INT16_T = "int16_t"
    INT32_T = "int32_t"
    INT64_T = "int64_t"
    UINT8_PTR_T = "uint8_t *"
    UINT16_PTR_T = "uint16_t *"
    UINT32_PTR_T = "uint32_t *"
    UINT64_PTR_T = "uint64_t *"
    INT8_PTR_T = "int8_t *"
    INT16_PTR_T = "int16_t *"
    INT32_PTR_T = "int32_t *"
    INT64_PTR_T = "int64_t *"


@enum.unique
class CpuName(CaseInsensitiveStrEnum):
    """
    CPU names defined in the SVD specification.
    See "cpuNameType" in the SVD schema.
    """

    CM0 = "CM0"
    CM0_PLUS_ = "CM0PLUS"
    CM0_PLUS = "CM0+"
    CM1 = "CM1"
    CM3 = "CM3"
    CM4 = "CM4"
    CM7 = "CM7"
    CM23 = "CM23"
    CM33 = "CM33"
    CM35P = "CM35P"
    CM55 = "CM55"
    CM85 = "CM85"
    SC000 = "SC000"
    SC300 = "SC300"
    ARMV8MML = "ARMV8MML"
    ARMV8MBL = "ARMV8MBL"
    ARMV81MML = "ARMV81MML"
    CA5 = "CA5"
    CA7 = "CA7"
    CA8 = "CA8"
    CA9 = "CA9"
    CA15 = "CA15"
    CA17 = "CA17"
    CA53 = "CA53"
    CA57 = "CA57"
    CA72 = "CA72"
    SMC1 = "SMC1"
    OTHER = "other"


ACCESS = enum_codec(Access)
READ_ACTION = enum_codec(ReadAction)
ENDIAN = enum_codec(Endian)
ADDRESS_BLOCK_USAGE = enum_codec(AddressBlockUsage)
PROTECTION = enum_codec(Protection)
ENUM_USAGE = enum_codec(EnumUsage)
WRITE_ACTION = enum_codec(WriteAction)
DATA_TYPE = enum_codec(DataType)
CPU_NAME = enum_codec(CpuName)


@binding
@dataclass(frozen=True, kw_only=True)
class RegisterProperties(Binding):
    """Common SVD device/peripheral/cluster/register level properties."""

    # Size of the register in bits.
    size: Optional[int] = elem("size", INT, default=None)

    # Access rights of the register.
    access: Optional[Access] = elem("access", ACCESS, default=None)

    # Protection level of the register.
    protection: Optional[Protection] = elem("protection", PROTECTION, default=None)

    # Reset value of the register.
    reset_value: Optional[int] = elem("resetValue", HEX, default=None)

    # Reset mask of the register.
    reset_mask: Optional[int] = elem("resetMask", HEX, default=None)

    def inherit(self, base: Optional[RegisterProperties]) -> RegisterProperties:
        """
        Get the properties of this element, using the properties of an enclosing element for
        values that are not set.
        """
        if base is None:
            return self

        return RegisterProperties(
            size=self.size if self.size is not None else base.size,
            access=self.access if self.access is not None else base.access,
            protection=(
                self.protection if self.protection is not None else base.protection
            ),
            reset_value=(
                self.reset_value if self.reset_value is not None else base.reset_value
            ),
            reset_mask=(
                self.reset_mask if self.reset_mask is not None else base.reset_mask
            ),
        )

    @property
    def is_full(self) -> bool:
        """True if all the properties needed to describe register content are set."""
        return all(
            f is not None
            for f in (self.size, self.access, self.reset_value, self.reset_mask)
        )


class RegisterPropertiesGroupMixin:
    """
    Common functionality for elements that contain a SVD 'registerPropertiesGroup'.
    The properties of the element are passed on as defaults to its children.
    """

    @classmethod
    def _scope_defaults(cls, values: Dict[str, Any], defaults: Defaults) -> Defaults:
        return values["register_properties"].inherit(defaults)


@binding
@dataclass(frozen=True, kw_only=True)
class DimElement(Binding):
    """Dimensions of a repeated SVD element. See 'dimElementGroup' in the SVD schema."""

    # Number of times the element is repeated.
    dim: int = elem("dim", INT)

    # Address increment between each instance.
    dim_increment: int = elem("dimIncrement", HEX)

    # Name suffixes of each instance, if given explicitly.
    dim_index: Optional[Tuple[str, ...]] = elem("dimIndex", DIM_INDEX, default=None)

    # Name of the C type used for the element, if it is repeated.
    dim_name: Optional[str] = elem("dimName", STRING, default=None)

    def indices(self) -> List[str]:
        """Name suffixes of each instance."""
        if self.dim_index is not None:
            return list(self.dim_index)
        return [str(i) for i in range(self.dim)]

    def offsets(self) -> List[int]:
        """Address offsets of each instance, relative to the first instance."""
        return [i * self.dim_increment for i in range(self.dim)]


@binding
@dataclass(frozen=True, kw_only=True)
class Cpu(Binding):
    """Description of the device processor."""

    TAG: ClassVar[str] = "cpu"

    # CPU name. See CpuName for possible values.
    name: CpuName = elem("name", CPU_NAME)

    # CPU hardware revision with the format "rNpM".
    revision: str = elem("revision", STRING)

    # Default endianness of the CPU.
    endian: Endian = elem("endian", ENDIAN)

    # True if the CPU has a memory protection unit (MPU).
    mpu_present: bool = elem("mpuPresent", BOOL)

    # True if the CPU has a floating point unit (FPU).
    fpu_present: bool = elem("fpuPresent", BOOL)

    # True if the CPU has a double precision floating point unit (FPU).
    fpu_double_precision: Optional[bool] = elem("fpuDP", BOOL, default=None)

    # True if the CPU implements the SIMD DSP extensions.
    dsp_present: Optional[bool] = elem("dspPresent", BOOL, default=None)

    # True if the CPU has an instruction cache.
    icache_present: Optional[bool] = elem("icachePresent", BOOL, default=None)

    # True if the CPU has a data cache.
    dcache_present: Optional[bool] = elem("dcachePresent", BOOL, default=None)

    # True if the CPU has a Vector Table Offset Register (VTOR).
    vtor_present: Optional[bool] = elem("vtorPresent", BOOL, default=None)

    # Bit width of interrupt priority levels in the Nested Vectored Interrupt Controller (NVIC).
    nvic_priority_bits: int = elem("nvicPrioBits", INT)

    # True if the CPU has a vendor-specific SysTick Timer.
    # If False, the Arm-defined System Tick Timer is used.
    has_vendor_systick: bool = elem("vendorSystickConfig", BOOL)

    # Maximum interrupt number in the CPU plus one.
    device_num_interrupts: Optional[int] = elem(
        "deviceNumInterrupts", INT, default=None
    )

    # Number of supported Secure Attribution Unit (SAU) regions.
    sau_num_regions: Optional[int] = elem("sauNumRegions", INT, default=None)


@binding
@dataclass(frozen=True, kw_only=True)
class Interrupt(Binding):
    """Peripheral interrupt description."""

    TAG: ClassVar[str] = "interrupt"

    name: str = elem("name", STRING)
    description: Optional[str] = elem("description", STRING, default=None)

    # Interrupt number.
    value: int = elem("value", INT)


@binding
@dataclass(frozen=True, kw_only=True)
class AddressBlock(Binding):
    """Address range mapped to a peripheral."""

    TAG: ClassVar[str] = "addressBlock"

    # Start address of the address block, relative to the peripheral base address.
    offset: int = elem("offset", HEX)

    # Number of address unit bits covered by the address block.
    size: int = elem("size", HEX)

    # Address block usage. See AddressBlockUsage for possible values.
    usage: AddressBlockUsage = elem("usage", ADDRESS_BLOCK_USAGE)

    # Protection level for the address block.
    protection: Optional[Protection] = elem("protection", PROTECTION, default=None)


@binding
@dataclass(frozen=True, kw_only=True)
class WriteConstraintRange(Binding):
    """Value range constraint for a register or field."""

    TAG: ClassVar[str] = "range"

    minimum: int = elem("minimum", INT)
    maximum: int = elem("maximum", INT)


@enum.unique
class WriteConstraintKind(enum.Enum):
    """Type of write constraint for a register or field."""

    # Only the last read value can be written.
    WRITE_AS_READ = enum.auto()
    # Only enumerated values can be written.
    USE_ENUMERATED_VALUES = enum.auto()
    # Only values within a given range can be written.
    RANGE = enum.auto()


@binding
@dataclass(frozen=True, kw_only=True)
class WriteConstraint(Binding):
    """Constraint on permitted values in a register or field. Exactly one member is set."""

    TAG: ClassVar[str] = "writeConstraint"

    write_as_read: Optional[bool] = elem("writeAsRead", BOOL, default=None)
    use_enumerated_values: Optional[bool] = elem(
        "useEnumeratedValues", BOOL, default=None
    )
    value_range: Optional[WriteConstraintRange] = elem(
        "range", WriteConstraintRange, default=None
    )

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        present = [name for name, value in values.items() if value is not None]
        if len(present) != 1:
            raise SvdStructureError(
                element,
                StructuralRule.WRITE_CONSTRAINT_CHOICE,
                f"found {len(present)}",
            )
        return cls(**values)

    @property
    def kind(self) -> WriteConstraintKind:
        if self.write_as_read is not None:
            return WriteConstraintKind.WRITE_AS_READ
        if self.use_enumerated_values is not None:
            return WriteConstraintKind.USE_ENUMERATED_VALUES
        return WriteConstraintKind.RANGE


@binding
@dataclass(frozen=True, kw_only=True)
class EnumeratedValue(Binding):
    """Value definition for a field."""

    TAG: ClassVar[str] = "enumeratedValue"

    name: str = elem("name", STRING)
    description: Optional[str] = elem("description", STRING, default=None)

    # Value of the enumerated value. May contain don't care bits, which are read as 0.
    value: Optional[int] = elem("value", INT, default=None)

    # True if the enumerated value applies to all values not covered by other values.
    is_default: Optional[bool] = elem("isDefault", BOOL, default=None)

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        if (values["value"] is None) == (values["is_default"] is None):
            raise SvdStructureError(element, StructuralRule.ENUMERATED_VALUE_CHOICE)
        return cls(**values)


@binding
@dataclass(frozen=True, kw_only=True)
class EnumeratedValues(Binding):
    """Container for enumerated values."""

    TAG: ClassVar[str] = "enumeratedValues"

    # Name of the element that this element is derived from.
    derived_from: Optional[str] = attr("derivedFrom", default=None)

    name: Optional[str] = elem("name", STRING, default=None)

    # Identifier of the enumeration in the device header file.
    header_enum_name: Optional[str] = elem("headerEnumName", STRING, default=None)

    # Description of which types of operations the enumeration is used for.
    usage: Optional[EnumUsage] = elem("usage", ENUM_USAGE, default=None)

    values: Tuple[EnumeratedValue, ...] = children(
        None, {"enumeratedValue": EnumeratedValue}
    )

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        if not values["values"] and values["derived_from"] is None:
            raise SvdStructureError(element, StructuralRule.ENUMERATION_NOT_EMPTY)
        return cls(**values)


class BitRange(NamedTuple):
    """Bit range of a field."""

    # Bit offset of the field.
    offset: int

    # Bit width of the field.
    width: int

    @property
    def lsb(self) -> int:
        return self.offset

    @property
    def msb(self) -> int:
        return self.offset + self.width - 1


class BitRangeSpec:
    """
    Field spec for the bit range of a field, which can be given in any of the three styles
    lsb/msb, bitOffset/bitWidth or bitRange "[msb:lsb]".
    Always encoded in the bitOffset/bitWidth style.
    """

    def read(self, element: ET._Element, defaults: Defaults) -> BitRange:
        lsb = optional_child_as("lsb", element, INT.decode)
        msb = optional_child_as("msb", element, INT.decode)
        if lsb is not None and msb is not None:
            return self._from_msb_lsb(element, msb, lsb)

        bit_offset = optional_child_as("bitOffset", element, INT.decode)
        if bit_offset is not None:
            bit_width = optional_child_as("bitWidth", element, INT.decode)
            return BitRange(
                offset=bit_offset, width=bit_width if bit_width is not None else 32
            )

        bit_range = optional_child_as("bitRange", element, _to_msb_lsb)
        if bit_range is not None:
            return self._from_msb_lsb(element, *bit_range)

        raise SvdMissingChildError(element, "bitOffset")

    def write(self, element: ET._Element, value: BitRange) -> None:
        element.append(INT.encode(value.offset, "bitOffset"))
        element.append(INT.encode(value.width, "bitWidth"))

    @staticmethod
    def _from_msb_lsb(element: ET._Element, msb: int, lsb: int) -> BitRange:
        if msb < lsb:
            raise SvdStructureError(
                element, StructuralRule.BIT_RANGE_ORDER, f"msb={msb}, lsb={lsb}"
            )
        return BitRange(offset=lsb, width=msb - lsb + 1)


def _to_msb_lsb(element: ET._Element) -> Tuple[int, int]:
    text = get_text(element)
    if not (text.startswith("[") and text.endswith("]")) or text.count(":") != 1:
        raise SvdLiteralError(text, "bit range", "expected the form [msb:lsb]")
    msb_text, lsb_text = text[1:-1].split(":")
    return parse_digits(msb_text, 10, text), parse_digits(lsb_text, 10, text)


@binding
@dataclass(frozen=True, kw_only=True)
class Field(Binding):
    """SVD field element."""

    TAG: ClassVar[str] = "field"

    derived_from: Optional[str] = attr("derivedFrom", default=None)

    name: str = elem("name", STRING)
    description: Optional[str] = elem("description", STRING, default=None)

    # Bit offset and width of the field.
    bit_range: BitRange = spec(BitRangeSpec())

    # Access rights of the field.
    access: Optional[Access] = elem("access", ACCESS, default=None)

    # Side effect when writing to the field.
    modified_write_values: Optional[WriteAction] = elem(
        "modifiedWriteValues", WRITE_ACTION, default=None
    )

    # Constraints on writing to the field.
    write_constraint: Optional[WriteConstraint] = elem(
        "writeConstraint", WriteConstraint, default=None
    )

    # Side effect when reading from the field.
    read_action: Optional[ReadAction] = elem("readAction", READ_ACTION, default=None)

    # Permitted values of the field. At most one set for reading and one for writing.
    enumerated_values: Tuple[EnumeratedValues, ...] = children(
        None, {"enumeratedValues": EnumeratedValues}
    )


InfoT = TypeVar("InfoT", bound=Binding)


def _delegate_to_info(self: Any, name: str) -> Any:
    """Make the fields of the shared info available on the variant itself."""
    if name.startswith("__") or name == "info":
        raise AttributeError(name)
    return getattr(self.info, name)


@dataclass(frozen=True)
class Single(Generic[InfoT]):
    """A register, cluster or peripheral that occurs once."""

    info: InfoT

    __getattr__ = _delegate_to_info

    def encode(self, tag: Optional[str] = None) -> ET._Element:
        return self.info.encode(tag)


@dataclass(frozen=True)
class Array(Generic[InfoT]):
    """
    A register, cluster or peripheral that is repeated.
    The name of the info contains a %s placeholder which is replaced by the index suffix of
    each instance.
    """

    info: InfoT

    # Repetition of the element.
    dim: DimElement

    __getattr__ = _delegate_to_info

    def instance_names(self) -> List[str]:
        """Names of the instances of the array."""
        name: str = self.info.name  # type: ignore
        return [name.replace("%s", index) for index in self.dim.indices()]

    def instance_offsets(self) -> List[int]:
        """Address offsets of the instances, relative to the address of the first instance."""
        return self.dim.offsets()

    def instances(self) -> Iterator[Tuple[str, int]]:
        """Iterate over the name and the relative address offset of each instance."""
        return zip(self.instance_names(), self.instance_offsets())

    def encode(self, tag: Optional[str] = None) -> ET._Element:
        element = self.info.encode(tag)
        return merge_elements(element, self.dim.encode(element.tag))


class DimensionedCodec(Generic[InfoT]):
    """
    Codec for elements that can either occur once or be repeated.
    The element is repeated if it contains a dimIncrement element.
    """

    def __init__(self, tag: str) -> None:
        """
        :param tag: Tag of the element. The info class is looked up by tag when decoding, which
                    allows elements to contain themselves.
        """
        self.tag: str = tag

    @property
    def info_class(self) -> type:
        return BINDING_REGISTRY.lookup(self.tag)

    def decode(
        self, element: ET._Element, /, defaults: Defaults = None
    ) -> Union[Single[InfoT], Array[InfoT]]:
        """
        Decode a Single or Array element.

        :raises SvdContractError: If the element tag does not match.
        :raises SvdStructureError: If the element is an array with a name lacking the %s
                                   placeholder, or with a dimIndex that does not match dim.
        :raises SvdDecodeError: If the element is otherwise invalid.
        """
        check_tag(element, self.tag)

        info = self.info_class.decode(element, defaults=defaults)

        if not has_child("dimIncrement", element):
            if "%s" in info.name:
                svdmodel.log.warning(
                    f"{self.tag} '{info.name}' has a %s placeholder but no dimensions"
                )
            return Single(info)

        dim = DimElement.decode(element)

        if "%s" not in info.name:
            raise SvdStructureError(
                element,
                StructuralRule.ARRAY_NAME_PLACEHOLDER,
                f"name is '{info.name}'",
            )

        if dim.dim_index is not None and len(dim.dim_index) != dim.dim:
            raise SvdStructureError(
                element,
                StructuralRule.DIM_INDEX_LENGTH,
                f"dim is {dim.dim}, dimIndex has {len(dim.dim_index)} entries",
            )

        return Array(info, dim)

    def encode(
        self, value: Union[Single[InfoT], Array[InfoT]], tag: Optional[str] = None
    ) -> ET._Element:
        return value.encode(tag if tag is not None else self.tag)


REGISTER: DimensionedCodec[RegisterInfo] = DimensionedCodec("register")
CLUSTER: DimensionedCodec[ClusterInfo] = DimensionedCodec("cluster")
PERIPHERAL: DimensionedCodec[PeripheralInfo] = DimensionedCodec("peripheral")


@binding
@dataclass(frozen=True, kw_only=True)
class RegisterInfo(RegisterPropertiesGroupMixin, Binding):
    """SVD register element, without the dimensions of a repeated register."""

    TAG: ClassVar[str] = "register"

    derived_from: Optional[str] = attr("derivedFrom", default=None)

    name: str = elem("name", STRING)
    display_name: Optional[str] = elem("displayName", STRING, default=None)
    description: Optional[str] = elem("description", STRING, default=None)

    # Alternate group of the register.
    alternate_group: Optional[str] = elem("alternateGroup", STRING, default=None)

    # Name of a different register that corresponds to this register.
    alternate_register: Optional[str] = elem(
        "alternateRegister", STRING, default=None
    )

    # Address offset of the register, relative to the parent element.
    address_offset: int = elem("addressOffset", HEX)

    # Register properties given on the register element itself.
    register_properties: RegisterProperties = group(RegisterProperties)

    # C data type to use when accessing the register.
    data_type: Optional[DataType] = elem("dataType", DATA_TYPE, default=None)

    # Side effect of writing the register.
    modified_write_values: Optional[WriteAction] = elem(
        "modifiedWriteValues", WRITE_ACTION, default=None
    )

    write_constraint: Optional[WriteConstraint] = elem(
        "writeConstraint", WriteConstraint, default=None
    )

    # Side effect of reading the register.
    read_action: Optional[ReadAction] = elem("readAction", READ_ACTION, default=None)

    fields: Tuple[Field, ...] = children("fields", {"field": Field})

    # Register properties of the register, including the ones inherited from the enclosing
    # elements when it was decoded.
    effective_properties: RegisterProperties = dc.field(
        default_factory=RegisterProperties
    )

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        # The scope of a register is its own properties inheriting the enclosing ones
        return cls(**values, effective_properties=defaults)


@binding
@dataclass(frozen=True, kw_only=True)
class ClusterInfo(RegisterPropertiesGroupMixin, Binding):
    """SVD cluster element, without the dimensions of a repeated cluster."""

    TAG: ClassVar[str] = "cluster"

    derived_from: Optional[str] = attr("derivedFrom", default=None)

    name: str = elem("name", STRING)
    description: Optional[str] = elem("description", STRING, default=None)

    # Name of a different cluster that corresponds to this cluster.
    alternate_cluster: Optional[str] = elem("alternateCluster", STRING, default=None)

    # Name of the C struct used to represent the cluster.
    header_struct_name: Optional[str] = elem(
        "headerStructName", STRING, default=None
    )

    # Address offset of the cluster, relative to the parent element.
    address_offset: int = elem("addressOffset", HEX)

    register_properties: RegisterProperties = group(RegisterProperties)

    # Registers and clusters in the cluster, in document order.
    children: Tuple[Union[Register, Cluster], ...] = children(
        None, {"register": REGISTER, "cluster": CLUSTER}
    )


@binding
@dataclass(frozen=True, kw_only=True)
class PeripheralInfo(RegisterPropertiesGroupMixin, Binding):
    """SVD peripheral element, without the dimensions of a repeated peripheral."""

    TAG: ClassVar[str] = "peripheral"

    derived_from: Optional[str] = attr("derivedFrom", default=None)

    name: str = elem("name", STRING)
    version: Optional[str] = elem("version", STRING, default=None)
    display_name: Optional[str] = elem("displayName", STRING, default=None)

    # Name of the group that the peripheral belongs to.
    group_name: Optional[str] = elem("groupName", STRING, default=None)

    description: Optional[str] = elem("description", STRING, default=None)

    # Name of a different peripheral that corresponds to this peripheral.
    alternate_peripheral: Optional[str] = elem(
        "alternatePeripheral", STRING, default=None
    )

    # String to prepend to the names of registers contained in the peripheral.
    prepend_to_name: Optional[str] = elem("prependToName", STRING, default=None)

    # String to append to the names of registers contained in the peripheral.
    append_to_name: Optional[str] = elem("appendToName", STRING, default=None)

    # Name of the C struct that represents the peripheral.
    header_struct_name: Optional[str] = elem(
        "headerStructName", STRING, default=None
    )

    disable_condition: Optional[str] = elem("disableCondition", STRING, default=None)

    # Base address of the peripheral.
    base_address: int = elem("baseAddress", HEX)

    register_properties: RegisterProperties = group(RegisterProperties)

    address_blocks: Tuple[AddressBlock, ...] = children(
        None, {"addressBlock": AddressBlock}
    )

    interrupts: Tuple[Interrupt, ...] = children(None, {"interrupt": Interrupt})

    # Registers and clusters that are direct children of the peripheral, in document order.
    # Empty for derived peripherals that don't add any registers.
    registers: Tuple[Union[Register, Cluster], ...] = children(
        "registers", {"register": REGISTER, "cluster": CLUSTER}
    )


# A register that occurs once or is repeated
Register = Union[Single[RegisterInfo], Array[RegisterInfo]]

# A cluster that occurs once or is repeated
Cluster = Union[Single[ClusterInfo], Array[ClusterInfo]]

# A peripheral that occurs once or is repeated
Peripheral = Union[Single[PeripheralInfo], Array[PeripheralInfo]]


@binding
@dataclass(frozen=True, kw_only=True)
class Device(RegisterPropertiesGroupMixin, Binding):
    """SVD device element."""

    TAG: ClassVar[str] = "device"

    # Version of the CMSIS schema that the SVD file conforms to.
    schema_version: Optional[str] = attr("schemaVersion", default=None)

    # Full device vendor name.
    vendor: Optional[str] = elem("vendor", STRING, default=None)

    # Abbreviated device vendor name.
    vendor_id: Optional[str] = elem("vendorID", STRING, default=None)

    name: str = elem("name", STRING)

    # Device series name.
    series: Optional[str] = elem("series", STRING, default=None)

    version: Optional[str] = elem("version", STRING, default=None)
    description: Optional[str] = elem("description", STRING, default=None)

    # The license to use for the device header file.
    license_text: Optional[str] = elem("licenseText", STRING, default=None)

    # Description of the device processor.
    cpu: Optional[Cpu] = elem("cpu", Cpu, default=None)

    # Device header filename without extension.
    header_system_filename: Optional[str] = elem(
        "headerSystemFilename", STRING, default=None
    )

    # String to prepend to all type definitions in the device header file.
    header_definitions_prefix: Optional[str] = elem(
        "headerDefinitionsPrefix", STRING, default=None
    )

    # Number of data bits selected by each address.
    address_unit_bits: Optional[int] = elem("addressUnitBits", INT, default=None)

    # Width of the maximum data transfer supported by the device.
    width: Optional[int] = elem("width", INT, default=None)

    # Default register properties for all registers in the device.
    register_properties: RegisterProperties = group(RegisterProperties)

    peripherals: Tuple[Peripheral, ...] = children(
        "peripherals", {"peripheral": PERIPHERAL}, required=True, strict=True
    )

    @property
    def default_register_properties(self) -> RegisterProperties:
        """Register properties inherited by every register in the device."""
        return self.register_properties

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        if not values["peripherals"]:
            svdmodel.log.warning(f"Device '{values['name']}' has no peripherals")
        else:
            svdmodel.log.debug(
                f"Decoded {len(values['peripherals'])} peripherals in '{values['name']}'"
            )
        return cls(**values)

    def encode(self, tag: Optional[str] = None) -> ET._Element:
        """
        Encode the device as an element.
        The schema location attribute is added when the schema version is known.
        """
        content = super().encode(tag)

        element = ET.Element(content.tag, nsmap={"xs": XS_NAMESPACE})
        for key, value in content.attrib.items():
            element.set(key, value)
        element.extend(content)

        if self.schema_version is not None:
            element.set(
                f"{{{XS_NAMESPACE}}}noNamespaceSchemaLocation",
                f"CMSIS-SVD_Schema_{self.schema_version.replace('.', '_')}.xsd",
            )

        return element
