# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Various internal functionality used by the bindings module.

Each SVD element type is represented by a frozen dataclass deriving from Binding. The dataclass
fields are declared with the field spec factories in this module (elem, attr, children, group,
spec), which describe where in the element tree the value of each field is found and which codec
converts it. Binding.decode() and Binding.encode() are implemented once on top of the specs.
"""

from __future__ import annotations

import dataclasses as dc
import enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Type,
    TypeVar,
    Union,
    ValuesView,
)

import lxml.etree as ET
from typing_extensions import Self

from ._elements import (
    check_tag,
    decode_child,
    find_child,
    get_text,
    iter_element_children,
    merge_elements,
    new_element,
)
from .errors import SvdContractError, SvdLiteralError, SvdMissingChildError
from .literals import from_bool, from_dim_index, from_int, to_bool, to_dim_index, to_hex, to_int

T = TypeVar("T")

if TYPE_CHECKING:
    from .bindings import RegisterProperties

# Register properties inherited from the enclosing elements
Defaults = Optional["RegisterProperties"]


class Codec(Protocol[T]):
    """Conversion between an element and a typed value."""

    def decode(self, element: ET._Element, /, defaults: Defaults = None) -> T:
        """
        Decode a value from an element.

        :param element: Element to decode.
        :param defaults: Register properties inherited from the enclosing elements.

        :raises SvdDecodeError: If the element does not describe a valid value.
        """
        ...

    def encode(self, value: T, tag: str) -> ET._Element:
        """Encode a value as an element with the given tag."""
        ...


class CaseInsensitiveStrEnum(enum.Enum):
    """String enum class that can be constructed from a case-insensitive string."""

    @classmethod
    def _missing_(cls, value: object) -> Optional[Self]:
        """Handler for string values with mismatched case."""
        if not isinstance(value, str):
            return None

        value_lower = value.lower()
        for member in cls:
            if member.value.lower() == value_lower:
                return member

        return None

    @classmethod
    def from_text(cls, text: str) -> Self:
        """
        Look up the enum member with the given value.

        :raises SvdLiteralError: If no member has the value.
        """
        try:
            return cls(text)
        except ValueError as e:
            raise SvdLiteralError(
                text,
                cls.__name__,
                f"expected one of {', '.join(repr(m.value) for m in cls)}",
            ) from e


class TextCodec(Generic[T]):
    """Codec for values that are fully described by the text content of an element."""

    def __init__(
        self, parse: Callable[[str], T], format: Callable[[T], str] = str
    ) -> None:
        """
        :param parse: Converts the element text to a value.
        :param format: Converts a value to element text.
        """
        self._parse = parse
        self._format = format

    def decode(self, element: ET._Element, /, defaults: Defaults = None) -> T:
        return self._parse(get_text(element))

    def encode(self, value: T, tag: str) -> ET._Element:
        return new_element(tag, self._format(value))


def _to_tuple(text: str) -> Tuple[str, ...]:
    return tuple(to_dim_index(text))


STRING: TextCodec[str] = TextCodec(str)
INT: TextCodec[int] = TextCodec(to_int, from_int)
HEX: TextCodec[int] = TextCodec(to_int, to_hex)
BOOL: TextCodec[bool] = TextCodec(to_bool, from_bool)
DIM_INDEX: TextCodec[Tuple[str, ...]] = TextCodec(_to_tuple, from_dim_index)


E = TypeVar("E", bound=CaseInsensitiveStrEnum)


def enum_codec(enum_cls: Type[E]) -> TextCodec[E]:
    """Create a codec for a CaseInsensitiveStrEnum subclass."""
    return TextCodec(enum_cls.from_text, lambda member: member.value)


class _Missing:
    ...


# Sentinel value used to indicate that a default value is missing.
MISSING = _Missing()

# Key of the field spec in the dataclass field metadata
_SPEC_KEY = "svd_spec"


class FieldSpec(Protocol):
    """Describes how the value of a dataclass field is stored in an element."""

    def read(self, element: ET._Element, defaults: Defaults) -> Any:
        ...

    def write(self, element: ET._Element, value: Any) -> None:
        ...


class Elem(Generic[T]):
    """Field spec for a value stored in a named child element."""

    def __init__(
        self,
        name: str,
        codec: Union[Codec[T], Type[Binding]],
        /,
        *,
        default: Union[T, _Missing] = MISSING,
        default_factory: Union[Callable[[], T], _Missing] = MISSING,
    ) -> None:
        """
        Only one of default or default_factory can be set.

        :param name: Name of the element.
        :param codec: Codec, or binding class, used to convert the element.
        :param default: Default value to use if the element is not found.
        :param default_factory: Callable that returns the default value to use if the element is
                                not found.
        """
        if default is not MISSING and default_factory is not MISSING:
            raise ValueError("Cannot set both default and default_factory")

        self.name: str = name
        self.codec: Codec[T] = as_codec(codec)
        self.default: Union[T, _Missing] = default
        self.default_factory: Union[Callable[[], T], _Missing] = default_factory

    def read(self, element: ET._Element, defaults: Defaults) -> T:
        child = find_child(self.name, element)

        if child is None:
            if not isinstance(self.default_factory, _Missing):
                return self.default_factory()
            if not isinstance(self.default, _Missing):
                return self.default
            raise SvdMissingChildError(element, self.name)

        return decode_child(
            element, child, lambda c: self.codec.decode(c, defaults=defaults)
        )

    def write(self, element: ET._Element, value: Optional[T]) -> None:
        if value is None:
            return
        element.append(self.codec.encode(value, self.name))


class Attr(Generic[T]):
    """Field spec for a value stored in an XML attribute."""

    def __init__(
        self,
        name: str,
        /,
        *,
        converter: Optional[Callable[[str], T]] = None,
        formatter: Callable[[T], str] = str,
        default: Union[T, _Missing] = MISSING,
    ) -> None:
        """
        :param name: Name of the attribute.
        :param converter: Optional callable that converts the attribute value from a string to
                          another type.
        :param formatter: Callable that converts a value back to an attribute string.
        :param default: Default value to use if the attribute is not found.
        """
        self.name: str = name
        self.converter: Optional[Callable[[str], T]] = converter
        self.formatter: Callable[[T], str] = formatter
        self.default: Union[T, _Missing] = default

    def read(self, element: ET._Element, defaults: Defaults) -> T:
        value = element.get(self.name)

        if value is None:
            if not isinstance(self.default, _Missing):
                return self.default
            raise SvdMissingChildError(element, f"@{self.name}")

        if self.converter is None:
            return value  # type: ignore

        return self.converter(value)

    def write(self, element: ET._Element, value: Optional[T]) -> None:
        if value is not None:
            element.set(self.name, self.formatter(value))


class Children(Generic[T]):
    """Field spec for an ordered sequence of repeated child elements."""

    def __init__(
        self,
        container: Optional[str],
        codecs: Mapping[str, Union[Codec[Any], Type[Binding]]],
        /,
        *,
        required: bool = False,
        strict: bool = False,
    ) -> None:
        """
        :param container: Name of the child element holding the items, or None if the items are
                          children of the element itself.
        :param codecs: Mapping from item tag to the codec used to convert items with that tag.
        :param required: If True, the container element must exist.
        :param strict: If True, every element in the container must have one of the given tags.
        """
        self.container: Optional[str] = container
        self.codecs: Dict[str, Codec[Any]] = {
            tag: as_codec(codec) for tag, codec in codecs.items()
        }
        self.required: bool = required
        self.strict: bool = strict

    def read(self, element: ET._Element, defaults: Defaults) -> Tuple[T, ...]:
        if self.container is not None:
            parent = find_child(self.container, element)
            if parent is None:
                if self.required:
                    raise SvdMissingChildError(element, self.container)
                return ()
        else:
            parent = element

        if self.strict:
            items = list(iter_element_children(parent))
            for item in items:
                if item.tag not in self.codecs:
                    raise SvdContractError(
                        f"Unexpected '{item.tag}' element in '{parent.tag}', "
                        f"expected one of {list(self.codecs)}"
                    )
        else:
            items = list(iter_element_children(parent, *self.codecs))

        return tuple(
            decode_child(
                parent,
                item,
                lambda c: self.codecs[c.tag].decode(c, defaults=defaults),
            )
            for item in items
        )

    def write(self, element: ET._Element, value: Tuple[T, ...]) -> None:
        if self.container is not None:
            if not value and not self.required:
                return
            parent = ET.SubElement(element, self.container)
        else:
            parent = element

        for item in value:
            parent.append(self._codec_for(item).encode(item, self._tag_for(item)))

    def _tag_for(self, item: Any) -> str:
        tag = getattr(item, "TAG", None)
        if tag in self.codecs:
            return tag
        if len(self.codecs) == 1:
            return next(iter(self.codecs))
        raise SvdContractError(f"Unable to determine the element tag for {item!r}")

    def _codec_for(self, item: Any) -> Codec[Any]:
        return self.codecs[self._tag_for(item)]


class Group(Generic[T]):
    """
    Field spec for a group of values that are stored directly in the element, such as
    the register properties group.
    """

    def __init__(self, binding_class: Type[Binding], /) -> None:
        self.binding_class: Type[Binding] = binding_class

    def read(self, element: ET._Element, defaults: Defaults) -> T:
        return self.binding_class.decode(element, defaults=defaults)  # type: ignore

    def write(self, element: ET._Element, value: T) -> None:
        merge_elements(element, value.encode(element.tag))  # type: ignore


def elem(
    name: str,
    codec: Union[Codec[Any], Type[Binding]],
    /,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a dataclass field stored in a named child element. See Elem."""
    return _field(
        Elem(name, codec, default=default, default_factory=default_factory),
        default=default,
        default_factory=default_factory,
    )


def attr(
    name: str,
    /,
    *,
    converter: Optional[Callable[[str], Any]] = None,
    formatter: Callable[[Any], str] = str,
    default: Any = MISSING,
) -> Any:
    """Declare a dataclass field stored in an XML attribute. See Attr."""
    return _field(
        Attr(name, converter=converter, formatter=formatter, default=default),
        default=default,
    )


def children(
    container: Optional[str],
    codecs: Mapping[str, Union[Codec[Any], Type[Binding]]],
    /,
    *,
    required: bool = False,
    strict: bool = False,
) -> Any:
    """Declare a dataclass field holding repeated child elements. See Children."""
    return _field(
        Children(container, codecs, required=required, strict=strict),
        default=MISSING if required else (),
    )


def group(binding_class: Type[Binding], /) -> Any:
    """Declare a dataclass field holding a group of values stored in the element. See Group."""
    return _field(Group(binding_class), default_factory=binding_class)


def spec(field_spec: FieldSpec, /, *, default: Any = MISSING) -> Any:
    """Declare a dataclass field using a custom field spec."""
    return _field(field_spec, default=default)


def _field(
    field_spec: FieldSpec,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    kwargs: Dict[str, Any] = {"metadata": {_SPEC_KEY: field_spec}}
    if default is not MISSING:
        kwargs["default"] = default
    elif default_factory is not MISSING:
        kwargs["default_factory"] = default_factory
    return dc.field(**kwargs)


def get_field_specs(klass: Type[Any]) -> Mapping[str, FieldSpec]:
    """Get the field specs of a binding class, in declaration order."""
    try:
        return klass._field_specs
    except AttributeError as e:
        raise ValueError(f"Class {klass} is not a binding") from e


class Binding:
    """
    Base class for all the SVD element classes.
    Subclasses are frozen, keyword-only dataclasses whose fields are declared with field specs.
    """

    # Tag of the element described by the class, or None for groups of values that are stored
    # directly in the enclosing element.
    TAG: ClassVar[Optional[str]] = None

    @classmethod
    def decode(cls, element: ET._Element, /, defaults: Defaults = None) -> Self:
        """
        Decode an instance of the class from an element.

        :param element: Element to decode.
        :param defaults: Register properties inherited from the enclosing elements.

        :raises SvdContractError: If the element tag does not match the class.
        :raises SvdDecodeError: If the element does not describe a valid instance.

        :return: Decoded instance.
        """
        check_tag(element, cls.TAG)

        field_specs = get_field_specs(cls)

        # Groups are stored in the element itself and may determine the defaults of the children
        values = {
            name: field_spec.read(element, defaults)
            for name, field_spec in field_specs.items()
            if isinstance(field_spec, Group)
        }

        scope = cls._scope_defaults(values, defaults)

        for name, field_spec in field_specs.items():
            if name not in values:
                values[name] = field_spec.read(element, scope)

        return cls._from_values(element, values, scope)

    @classmethod
    def _scope_defaults(cls, values: Dict[str, Any], defaults: Defaults) -> Defaults:
        """
        Register properties passed on to the children of the element.

        :param values: Decoded values of the groups in the element.
        :param defaults: Register properties inherited from the enclosing elements.
        """
        return defaults

    @classmethod
    def _from_values(
        cls, element: ET._Element, values: Dict[str, Any], defaults: Defaults
    ) -> Self:
        """Construct the instance from the decoded field values. Structural rules go here."""
        return cls(**values)

    def encode(self, tag: Optional[str] = None) -> ET._Element:
        """
        Encode the instance as an element.
        Optional values that are not set are omitted.

        :param tag: Tag of the element. Defaults to the tag of the class.
        """
        element_tag = tag if tag is not None else self.TAG
        if element_tag is None:
            raise SvdContractError(f"{type(self).__name__} requires an explicit tag")

        element = ET.Element(element_tag)
        for name, field_spec in get_field_specs(type(self)).items():
            field_spec.write(element, getattr(self, name))

        return element


class BindingCodec(Generic[T]):
    """Codec adapter for Binding classes."""

    def __init__(self, binding_class: Type[Binding]) -> None:
        self.binding_class = binding_class

    def decode(self, element: ET._Element, /, defaults: Defaults = None) -> T:
        return self.binding_class.decode(element, defaults=defaults)  # type: ignore

    def encode(self, value: T, tag: str) -> ET._Element:
        return value.encode(tag)  # type: ignore


def as_codec(codec: Union[Codec[T], Type[Binding]]) -> Codec[T]:
    if isinstance(codec, type) and issubclass(codec, Binding):
        return BindingCodec(codec)
    return codec


C = TypeVar("C", bound=Type[Binding])


class BindingRegistry:
    """Simple container for SVD element classes, indexed by tag."""

    def __init__(self) -> None:
        self._element_classes: Dict[str, Type[Binding]] = {}

    def add(self, element_class: C, /) -> C:
        """
        Add a class to the binding registry.
        This is intended to be used as a class decorator, after the dataclass decorator.
        """
        if not dc.is_dataclass(element_class):
            raise TypeError(f"{element_class} must be a dataclass")

        field_specs: Dict[str, FieldSpec] = {
            f.name: f.metadata[_SPEC_KEY]
            for f in dc.fields(element_class)
            if _SPEC_KEY in f.metadata
        }
        setattr(element_class, "_field_specs", field_specs)

        tag = element_class.TAG
        if tag is not None:
            if tag in self._element_classes:
                raise ValueError(
                    f"Multiple classes for tag '{tag}': "
                    f"{self._element_classes[tag]}, {element_class}"
                )
            self._element_classes[tag] = element_class

        return element_class

    def lookup(self, tag: str) -> Type[Binding]:
        """Get the class registered for a tag."""
        try:
            return self._element_classes[tag]
        except KeyError as e:
            raise SvdContractError(f"No binding registered for '{tag}'") from e

    @property
    def bindings(self) -> ValuesView[Type[Binding]]:
        """Get a live view of the registered bindings."""
        return self._element_classes.values()
