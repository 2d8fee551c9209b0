# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Accessors used to read values from, and build, lxml element trees.
"""

from __future__ import annotations

import typing
from typing import Callable, Iterator, List, Optional, TypeVar

import lxml.etree as ET

from .errors import (
    SvdContractError,
    SvdDecodeError,
    SvdEmptyContentError,
    SvdMissingChildError,
    SvdNestedError,
)

T = TypeVar("T")

# Decoder of a value from an element
ElementDecoder = Callable[[ET._Element], T]


def check_tag(element: ET._Element, tag: Optional[str]) -> None:
    """
    Check that the element has the expected tag.

    :raises SvdContractError: If the tag does not match.
    """
    if tag is not None and element.tag != tag:
        raise SvdContractError(
            f"Expected a '{tag}' element, got '{element.tag}'. "
            "This indicates that the element was passed to the wrong decoder."
        )


def get_text(element: ET._Element) -> str:
    """
    Get the text content of an element, without surrounding whitespace.
    Text on either side of comments in the element is joined.

    :raises SvdEmptyContentError: If the element has no text.
    """
    text = "".join(typing.cast(List[str], element.xpath("text()"))).strip()
    if not text:
        raise SvdEmptyContentError(element)
    return text


def find_child(name: str, element: ET._Element) -> Optional[ET._Element]:
    """Get the first child of the element with the given tag, or None if there is no such child."""
    for child in element.iterchildren(name):
        return child
    return None


def has_child(name: str, element: ET._Element) -> bool:
    return find_child(name, element) is not None


def get_child(name: str, element: ET._Element) -> ET._Element:
    """
    Get the first child of the element with the given tag.

    :raises SvdMissingChildError: If there is no such child.
    """
    child = find_child(name, element)
    if child is None:
        raise SvdMissingChildError(element, name)
    return child


def get_child_text(name: str, element: ET._Element) -> str:
    """Get the text content of a required child element."""
    return get_child_as(name, element, get_text)


def get_child_text_optional(name: str, element: ET._Element) -> Optional[str]:
    """
    Get the text content of an optional child element.
    None is returned if the child does not exist, but an error is still raised if the child exists
    without any text.
    """
    return optional_child_as(name, element, get_text)


def decode_child(
    element: ET._Element, child: ET._Element, decoder: ElementDecoder[T]
) -> T:
    """
    Decode a child element, wrapping any decode error with the parent element.

    :raises SvdNestedError: If the child could not be decoded.
    """
    try:
        return decoder(child)
    except SvdDecodeError as e:
        raise SvdNestedError(element, child) from e


def get_child_as(name: str, element: ET._Element, decoder: ElementDecoder[T]) -> T:
    """
    Decode a required child element.

    :param name: Tag of the child element.
    :param element: Parent element.
    :param decoder: Decoder to apply to the child element.

    :raises SvdMissingChildError: If the child does not exist.
    :raises SvdNestedError: If the child could not be decoded.

    :return: Decoded child value.
    """
    return decode_child(element, get_child(name, element), decoder)


def optional_child_as(
    name: str, element: ET._Element, decoder: ElementDecoder[T]
) -> Optional[T]:
    """
    Decode an optional child element.

    :param name: Tag of the child element.
    :param element: Parent element.
    :param decoder: Decoder to apply to the child element.

    :raises SvdNestedError: If the child exists but could not be decoded.

    :return: Decoded child value, or None if the child does not exist.
    """
    child = find_child(name, element)
    if child is None:
        return None
    return decode_child(element, child, decoder)


def iter_element_children(
    element: Optional[ET._Element], *tags: str
) -> Iterator[ET._Element]:
    """
    Iterate over the child elements of an lxml element, optionally filtered by tag.
    Comments and processing instructions are skipped.
    If the element is None, an empty iterator is returned.
    """
    if element is None:
        return iter(())

    if not tags:
        child_iter = element.iterchildren(ET.Element)
    else:
        child_iter = element.iterchildren(*tags)

    return typing.cast(Iterator[ET._Element], child_iter)


def new_element(tag: str, text: Optional[str] = None) -> ET._Element:
    """Create a new element with optional text content."""
    element = ET.Element(tag)
    if text is not None:
        element.text = text
    return element


def merge_elements(base: ET._Element, other: ET._Element) -> ET._Element:
    """
    Merge the attributes and children of one element into another.
    Children of `other` replace children with the same tag in `base`, remaining ones are
    appended. The base element is modified in place.

    :return: The base element.
    """
    for key, value in other.attrib.items():
        base.set(key, value)

    for child in list(iter_element_children(other)):
        existing = find_child(child.tag, base)
        if existing is not None:
            base.replace(existing, child)
        else:
            base.append(child)

    return base
