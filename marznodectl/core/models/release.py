"""
Release models: host architecture facts and the resolved Xray asset.
"""

from __future__ import annotations

from pydantic import BaseModel


class HostArch(BaseModel):
    """Architecture facts probed from the host.

    ``has_fpu`` only matters for ARMv6/ARMv7; ``little_endian`` only
    for MIPS64. Both default to False when not probed.
    """

    machine: str
    has_fpu: bool = False
    little_endian: bool = False


class XrayAsset(BaseModel):
    """A downloadable Xray-core release archive."""

    version: str
    suffix: str
    filename: str
    url: str
