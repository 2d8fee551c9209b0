# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

if TYPE_CHECKING:
    import lxml.etree as ET


def element_repr(
    element: ET._Element,
    props: Mapping[Any, Any] = MappingProxyType({}),
    *,
    ancestors: bool = True,
) -> str:
    """
    Informative string representation of an element, used in error messages.
    The text of a 'name' child element is included when present.

    :param element: Element to describe.
    :param props: Additional properties to include in the description.
    :param ancestors: If True, also describe the ancestors of the element.

    :return: Description of the element, e.g. "[register(2) {'name': 'CTRL'}] in [registers]".
    """
    props = dict(props)

    name = element.findtext("name")
    if name is not None and "name" not in props:
        props["name"] = name.strip()

    parent = element.getparent()
    if parent is not None:
        ancestors_str = f" in {element_repr(parent)}" if ancestors else ""
        try:
            child_index = parent.index(element)
        except ValueError:
            child_index = None
    else:
        ancestors_str = ""
        child_index = None

    child_index_str = f"({child_index})" if child_index is not None else ""
    props_str = f" {props}" if props else ""

    return f"[{element.tag}{child_index_str}{props_str}]{ancestors_str}"


class SvdError(Exception):
    """Base class for errors raised by the library."""

    ...


class SvdParseError(SvdError):
    """Raised when an SVD document could not be read or tokenized."""

    ...


class SvdContractError(SvdError, RuntimeError):
    """
    Raised when the decoder is used in a way that can only be the result of a programming error,
    such as decoding an element with a mismatched tag.
    """

    ...


class SvdEncodeError(SvdError, ValueError):
    """Raised when a value can not be represented in the SVD format."""

    ...


class SvdDecodeError(SvdError, ValueError):
    """Base class for errors caused by invalid content in the decoded element tree."""

    def __init__(self, message: str, element: Optional[ET._Element] = None) -> None:
        super().__init__(message)
        self.element: Optional[ET._Element] = element


class SvdMissingChildError(SvdDecodeError):
    """Raised when a required child element is absent."""

    def __init__(self, element: ET._Element, name: str) -> None:
        super().__init__(
            f"{element_repr(element)} is missing required element '{name}'", element
        )
        self.name: str = name


class SvdEmptyContentError(SvdDecodeError):
    """Raised when an element that must contain text is empty."""

    def __init__(self, element: ET._Element) -> None:
        super().__init__(f"{element_repr(element)} has no text content", element)


class SvdLiteralError(SvdDecodeError):
    """Raised when element text does not follow the expected literal grammar."""

    def __init__(self, text: str, expected: str, reason: str = "") -> None:
        formatted_reason = "" if not reason else f" ({reason})"
        super().__init__(f"Invalid {expected} literal '{text}'{formatted_reason}")
        self.text: str = text
        self.expected: str = expected
        self.reason: str = reason


@enum.unique
class StructuralRule(enum.Enum):
    """Cross-field rules checked while assembling composite elements."""

    # The name of an array element must contain the %s placeholder.
    ARRAY_NAME_PLACEHOLDER = "array name must contain '%s'"
    # The number of dimIndex entries must equal dim.
    DIM_INDEX_LENGTH = "dimIndex length must equal dim"
    # A write constraint must specify exactly one kind of constraint.
    WRITE_CONSTRAINT_CHOICE = "writeConstraint must contain exactly one constraint"
    # An enumerated value must have exactly one of value and isDefault.
    ENUMERATED_VALUE_CHOICE = "enumeratedValue must contain exactly one of value, isDefault"
    # A non-derived enumeration must contain at least one value.
    ENUMERATION_NOT_EMPTY = "enumeratedValues must contain at least one enumeratedValue"
    # The most significant bit of a field can not be lower than the least significant bit.
    BIT_RANGE_ORDER = "field msb must not be lower than lsb"
    # The device must contain at least one peripheral.
    PERIPHERALS_NOT_EMPTY = "device must contain at least one peripheral"


class SvdStructureError(SvdDecodeError):
    """Raised when a cross-field rule is broken in an otherwise well-formed element."""

    def __init__(
        self, element: ET._Element, rule: StructuralRule, explanation: str = ""
    ) -> None:
        formatted_explanation = "" if not explanation else f" ({explanation})"
        super().__init__(
            f"Invalid SVD file element:\n  * {element_repr(element)}\n"
            f"{rule.value}{formatted_explanation}",
            element,
        )
        self.rule: StructuralRule = rule


class SvdNestedError(SvdDecodeError):
    """
    Raised when decoding a child element failed.
    The original error is available as __cause__.
    """

    def __init__(self, element: ET._Element, child: ET._Element) -> None:
        super().__init__(f"Error decoding {element_repr(child)}", element)
        self.child: ET._Element = child

    @property
    def root_cause(self) -> BaseException:
        """The innermost error in the chain of nested errors."""
        error: BaseException = self
        while isinstance(error, SvdNestedError) and error.__cause__ is not None:
            error = error.__cause__
        return error

    @property
    def path(self) -> List[str]:
        """Short descriptions of the failing elements, from the outermost to the innermost."""
        parts: List[str] = []
        error: Optional[BaseException] = self
        while isinstance(error, SvdNestedError):
            parts.append(element_repr(error.child, ancestors=False))
            error = error.__cause__
        return parts
