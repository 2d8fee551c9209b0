# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Conversion between SVD literal text and Python values.

The functions in this module operate on text only. Element level handling, such as reporting
which element a malformed literal was found in, is done by the callers.
"""

from __future__ import annotations

from typing import FrozenSet, List, Mapping, Sequence, Tuple

from .errors import SvdContractError, SvdEncodeError, SvdLiteralError

# Largest value representable by an SVD scaledNonNegativeInteger.
U32_MAX = 0xFFFF_FFFF

_RADIX_DIGITS: Mapping[int, FrozenSet[str]] = {
    2: frozenset("01"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}


def mask_dont_care(digits: str) -> str:
    """
    Replace the don't care character x/X in a binary literal with 0.

    :param digits: Binary digits, possibly containing don't care characters.

    :return: Binary digits with every don't care character replaced by 0.
    """
    return digits.replace("x", "0").replace("X", "0")


def split_radix(text: str) -> Tuple[str, int]:
    """
    Select the radix of an integer literal from its prefix.
    Don't care characters in binary literals are masked as part of the selection.

    :param text: Integer literal following the SVD format.

    :return: Tuple of the digits without the prefix, and the radix of the digits.
    """
    if text.startswith(("0x", "0X")):
        return text[2:], 16
    if text.startswith("#"):
        return mask_dont_care(text[1:]), 2
    if text.startswith("0b"):
        return mask_dont_care(text[2:]), 2
    return text, 10


def parse_digits(digits: str, radix: int, literal: str) -> int:
    """
    Convert digits in the given radix to an unsigned 32-bit integer.

    :param digits: Digits to convert, without any prefix.
    :param radix: Radix of the digits. One of 2, 10, 16.
    :param literal: Full literal text, used in error messages.

    :raises SvdLiteralError: If a digit is not valid in the radix or the value does not fit in
                             32 bits.

    :return: Decoded integer.
    """
    if not digits:
        raise SvdLiteralError(literal, "integer", "no digits")

    invalid = set(digits) - _RADIX_DIGITS[radix]
    if invalid:
        raise SvdLiteralError(
            literal,
            "integer",
            f"invalid digit(s) {''.join(sorted(invalid))!r} for base {radix}",
        )

    try:
        value = int(digits, base=radix)
    except ValueError as e:
        raise SvdLiteralError(literal, "integer", str(e)) from e

    if value > U32_MAX:
        raise SvdLiteralError(literal, "integer", "number too large to fit in 32 bits")

    return value


def to_int(number: str) -> int:
    """
    Convert a string representation of an integer following the SVD format to its corresponding
    integer representation.

    Supported notations are 0x/0X (hexadecimal), # and 0b (binary, with x/X as don't care bits
    read as 0) and plain decimal.

    :param number: String representation of the integer.

    :raises SvdLiteralError: If the string is not a valid unsigned 32-bit integer.

    :return: Decoded integer.
    """
    digits, radix = split_radix(number)
    return parse_digits(digits, radix, number)


def from_int(value: int) -> str:
    """Decimal representation of an integer."""
    return str(value)


def to_hex(value: int) -> str:
    """Hexadecimal representation of an integer, as commonly used for addresses and masks."""
    return f"0x{value:08X}"


def to_bool(value: str) -> bool:
    """
    Convert a string representation of a boolean following the SVD format to its corresponding
    boolean representation.

    :param value: String representation of the boolean.

    :raises SvdLiteralError: If the string is not one of "0", "1", "true" or "false".

    :return: Decoded boolean.
    """
    if value == "0":
        return False
    if value == "1":
        return True
    if value in ("true", "false"):
        return value == "true"
    raise SvdLiteralError(value, "boolean", "expected one of '0', '1', 'true', 'false'")


def from_bool(value: bool) -> str:
    return "true" if value else "false"


def to_dim_index(text: str) -> List[str]:
    """
    Expand a dimIndex string to the list of index suffixes it describes.

    A string of the form "N-M" is expanded to the decimal numbers N through M (inclusive).
    A comma separated string is split into its parts, which are used as is.

    :param text: dimIndex string.

    :raises SvdLiteralError: If the end points of a range are not decimal integers.
    :raises SvdContractError: If the string contains neither '-' nor ','.

    :return: List of index suffixes.
    """
    if "-" in text:
        start_text, end_text = text.split("-", 1)
        start = parse_digits(start_text, 10, text)
        end = parse_digits(end_text, 10, text) + 1
        return [str(i) for i in range(start, end)]

    if "," in text:
        return text.split(",")

    raise SvdContractError(
        f"dimIndex '{text}' is neither a range nor a comma separated list"
    )


def from_dim_index(indices: Sequence[str]) -> str:
    """
    Convert a list of index suffixes to a dimIndex string.
    Consecutive ascending decimal indices are written as a range, anything else as a list.
    An empty list is written as the empty range "1-0".

    :param indices: Index suffixes.

    :raises SvdEncodeError: If the indices can't be written in a form that decodes to the same list.

    :return: dimIndex string.
    """
    if not indices:
        return "1-0"

    if all(_is_canonical_decimal(i) for i in indices):
        numbers = [int(i) for i in indices]
        if numbers == list(range(numbers[0], numbers[0] + len(numbers))):
            return f"{numbers[0]}-{numbers[-1]}"

    if len(indices) < 2 or any(("-" in i or "," in i) for i in indices):
        raise SvdEncodeError(f"Index list {list(indices)} can't be written as a dimIndex")

    return ",".join(indices)


def _is_canonical_decimal(text: str) -> bool:
    return text.isascii() and text.isdigit() and str(int(text)) == text
