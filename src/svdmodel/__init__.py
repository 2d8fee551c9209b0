# Copyright (c) 2022 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from . import literals
from .bindings import (
    Access,
    ReadAction,
    Endian,
    AddressBlockUsage,
    Protection,
    EnumUsage,
    WriteAction,
    DataType,
    CpuName,
    WriteConstraintKind,
    Cpu,
    AddressBlock,
    Interrupt,
    RegisterProperties,
    DimElement,
    WriteConstraintRange,
    WriteConstraint,
    EnumeratedValue,
    EnumeratedValues,
    BitRange,
    Field,
    RegisterInfo,
    ClusterInfo,
    PeripheralInfo,
    Single,
    Array,
    DimensionedCodec,
    Register,
    Cluster,
    Peripheral,
    REGISTER,
    CLUSTER,
    PERIPHERAL,
    Device,
)
from .errors import (
    SvdError,
    SvdParseError,
    SvdContractError,
    SvdEncodeError,
    SvdDecodeError,
    SvdMissingChildError,
    SvdEmptyContentError,
    SvdLiteralError,
    SvdStructureError,
    SvdNestedError,
    StructuralRule,
)
from .parsing import (
    parse,
    parse_string,
    decode_device,
    encode_device,
    to_string,
    Options,
)

import importlib.metadata
import logging

__version__ = importlib.metadata.version("svdmodel")


def _init_logger() -> logging.Logger:
    formatter = logging.Formatter("{message}", style="{")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger("svdmodel")
    logger.setLevel(logging.ERROR)
    logger.addHandler(handler)

    return logger


# logging.Logger instance used for log output from svdmodel
log = _init_logger()

__all__ = [
    # from bindings
    "Access",
    "ReadAction",
    "Endian",
    "AddressBlockUsage",
    "Protection",
    "EnumUsage",
    "WriteAction",
    "DataType",
    "CpuName",
    "WriteConstraintKind",
    "Cpu",
    "AddressBlock",
    "Interrupt",
    "RegisterProperties",
    "DimElement",
    "WriteConstraintRange",
    "WriteConstraint",
    "EnumeratedValue",
    "EnumeratedValues",
    "BitRange",
    "Field",
    "RegisterInfo",
    "ClusterInfo",
    "PeripheralInfo",
    "Single",
    "Array",
    "DimensionedCodec",
    "Register",
    "Cluster",
    "Peripheral",
    "REGISTER",
    "CLUSTER",
    "PERIPHERAL",
    "Device",
    # from errors
    "SvdError",
    "SvdParseError",
    "SvdContractError",
    "SvdEncodeError",
    "SvdDecodeError",
    "SvdMissingChildError",
    "SvdEmptyContentError",
    "SvdLiteralError",
    "SvdStructureError",
    "SvdNestedError",
    "StructuralRule",
    # from parsing
    "parse",
    "parse_string",
    "decode_device",
    "encode_device",
    "to_string",
    "Options",
    # other
    "log",
    "literals",
    "__version__",
]
