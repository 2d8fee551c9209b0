# Copyright (c) 2022 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import dataclasses as dc
import re
import typing
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter_ns
from typing import Iterable, Mapping, Sequence, Union

import lxml.etree as ET

import svdmodel

from ._elements import iter_element_children
from .bindings import Device
from .errors import SvdParseError, SvdStructureError, StructuralRule


@dataclass(frozen=True)
class Options:
    """Options to configure the SVD parsing behavior."""

    # Treat a device without any peripherals as an error.
    # If set to False, such a device is decoded with an empty peripheral list.
    require_peripherals: bool = False

    # Cluster/register elements to remove from the XML document prior to decoding.
    # This can be used to remove outdated/deprecated elements from the device if they cause
    # issues with decoding.
    #
    # The value should be a dictionary mapping string peripheral name regex patterns to lists
    # containing the paths of elements to remove from the peripherals matching the pattern.
    # For example, passing the value
    # {"UART[0-9]": ["CONFIG.DEPRECATED"]}
    # would cause the element named "DEPRECATED" to be removed from the element named "CONFIG"
    # in peripherals whose name match "UART[0-9]" (UART0, UART1 etc.).
    #
    # Note: the element paths must match exactly the names used in the SVD document.
    # Note: no exception is raised if the paths given don't match anything in the SVD document.
    skip_registers: Mapping[str, Sequence[str]] = dc.field(default_factory=dict)

    # Remove comments from the XML document when reading it.
    remove_comments: bool = True


def parse(svd_path: Union[str, Path], options: Options = Options()) -> Device:
    """
    Parse a device described by a SVD file.

    :param svd_path: Path to the SVD file.
    :param options: Parsing options.

    :raises FileNotFoundError: If the SVD file does not exist.
    :raises SvdParseError: If the SVD file is not a well-formed XML document.
    :raises SvdDecodeError: If the SVD document does not describe a valid device.

    :return: Parsed `Device` representation of the SVD file.
    """
    svd_file = Path(svd_path)

    if not svd_file.is_file():
        raise FileNotFoundError(f"No such file: {svd_file.absolute()}")

    t_parse_start = perf_counter_ns()

    try:
        with open(svd_file, "rb") as f:
            xml_device = ET.parse(f, parser=_make_parser(options))
    except ET.XMLSyntaxError as e:
        raise SvdParseError(f"Error parsing SVD file {svd_file}") from e

    t_parse = (perf_counter_ns() - t_parse_start) / 1_000_000
    svdmodel.log.debug(f"Read {svd_file} in {t_parse:.2f} ms")

    return decode_device(xml_device.getroot(), options)


def parse_string(svd: Union[str, bytes], options: Options = Options()) -> Device:
    """
    Parse a device described by a SVD document.

    :param svd: Content of the SVD document.
    :param options: Parsing options.

    :raises SvdParseError: If the document is not well-formed XML.
    :raises SvdDecodeError: If the document does not describe a valid device.

    :return: Parsed `Device` representation of the document.
    """
    if isinstance(svd, str):
        svd = svd.encode("utf-8")

    try:
        root = ET.fromstring(svd, parser=_make_parser(options))
    except ET.XMLSyntaxError as e:
        raise SvdParseError("Error parsing SVD document") from e

    return decode_device(root, options)


def decode_device(root: ET._Element, options: Options = Options()) -> Device:
    """
    Decode a device from an already parsed element tree.
    The tree is modified if options.skip_registers is used.

    :param root: The device element.
    :param options: Parsing options.

    :raises SvdDecodeError: If the tree does not describe a valid device.

    :return: Decoded device.
    """
    t_decode_start = perf_counter_ns()

    if options.skip_registers:
        for peripheral in _iter_peripheral_elements(root):
            remove_registers(peripheral, options.skip_registers)

    device = Device.decode(root)

    if options.require_peripherals and not device.peripherals:
        raise SvdStructureError(root, StructuralRule.PERIPHERALS_NOT_EMPTY)

    t_decode = (perf_counter_ns() - t_decode_start) / 1_000_000
    svdmodel.log.debug(f"Decoded device '{device.name}' in {t_decode:.2f} ms")

    return device


def encode_device(device: Device) -> ET._Element:
    """Encode a device as an element tree."""
    return device.encode()


def to_string(device: Device, *, pretty_print: bool = True) -> bytes:
    """Encode a device as a SVD document."""
    return ET.tostring(
        encode_device(device),
        xml_declaration=True,
        encoding="utf-8",
        pretty_print=pretty_print,
    )


def remove_registers(
    peripheral_element: ET._Element,
    remove: Mapping[str, Sequence[str]],
) -> None:
    """
    Remove clusters/registers from a peripheral by deleting the nodes from the XML tree itself.

    :param peripheral_element: Peripheral node to filter registers from.
    :param remove: Mapping from peripheral name patterns to element paths to remove.
    """
    registers = peripheral_element.find("registers")
    if registers is None:
        # Skip if the node has no <registers> node (permitted on derived peripherals)
        return

    name = peripheral_element.findtext("name", default="").strip()

    for pattern_str, paths in remove.items():
        if re.fullmatch(pattern_str, name) is None:
            continue

        for path in paths:
            # Names are passed as XPath variables so that they need no quoting
            names = {f"p{i}": p for i, p in enumerate(path.split("."))}
            xpath = "." + "".join((f"/*[name=${var}]" for var in names))
            nodes = typing.cast(Iterable[ET._Element], registers.xpath(xpath, **names))
            for node in nodes:
                if (parent := node.getparent()) is not None:
                    parent.remove(node)


def _iter_peripheral_elements(root: ET._Element) -> Iterable[ET._Element]:
    return iter_element_children(root.find("peripherals"), "peripheral")


def _make_parser(options: Options) -> ET.XMLParser:
    # Note: remove comments as otherwise these are present as nodes in the returned XML tree
    return ET.XMLParser(remove_comments=options.remove_comments)
