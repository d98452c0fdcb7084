"""
Architecture detection and Xray-core asset resolution.

Maps the machine string reported by the OS to the suffix used in
Xray-core release file names (``Xray-linux-<suffix>.zip``). ARMv6/ARMv7
fall back to the soft-float ``arm32-v5`` build when the CPU has no VFP
unit; MIPS64 picks the little-endian build when lscpu says so.

Probes are read-only: /proc/cpuinfo and lscpu.
"""

from __future__ import annotations

import logging
import platform
import re
import subprocess
from pathlib import Path

from marznodectl.core.errors import UnsupportedArchitecture
from marznodectl.core.models.release import HostArch, XrayAsset

logger = logging.getLogger(__name__)

CPUINFO_PATH = Path("/proc/cpuinfo")

# machine string → asset suffix, for machines that need no extra facts
_FIXED_SUFFIXES: dict[str, str] = {
    "i386": "32",
    "i686": "32",
    "amd64": "64",
    "x86_64": "64",
    "armv5tel": "arm32-v5",
    "armv8": "arm64-v8a",
    "aarch64": "arm64-v8a",
    "mips": "mips32",
    "mipsle": "mips32le",
    "mips64le": "mips64le",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "riscv64": "riscv64",
    "s390x": "s390x",
}

# hard-float ARM builds; without a VFP unit these fall back to arm32-v5
_FPU_SUFFIXES: dict[str, str] = {
    "armv6l": "arm32-v6",
    "armv7": "arm32-v7a",
    "armv7l": "arm32-v7a",
}

_FPU_MACHINES = frozenset(_FPU_SUFFIXES)
_ENDIAN_MACHINES = frozenset({"mips64"})

ASSET_SUFFIXES = frozenset(
    {*_FIXED_SUFFIXES.values(), *_FPU_SUFFIXES.values(), "mips64"}
)


def resolve_asset_suffix(
    machine: str,
    *,
    has_fpu: bool = False,
    little_endian: bool = False,
) -> str:
    """Return the Xray-core asset suffix for ``machine``.

    Args:
        machine: Architecture string as reported by ``uname -m``.
        has_fpu: Hardware floating point present (ARMv6/ARMv7 only).
        little_endian: Little-endian byte order (``mips64`` only).

    Raises:
        UnsupportedArchitecture: No release asset exists for ``machine``.
    """
    if machine in _FIXED_SUFFIXES:
        return _FIXED_SUFFIXES[machine]
    if machine in _FPU_SUFFIXES:
        return _FPU_SUFFIXES[machine] if has_fpu else "arm32-v5"
    if machine == "mips64":
        return "mips64le" if little_endian else "mips64"
    raise UnsupportedArchitecture(machine)


def resolve_host(host: HostArch) -> str:
    """``resolve_asset_suffix`` for probed host facts."""
    return resolve_asset_suffix(
        host.machine,
        has_fpu=host.has_fpu,
        little_endian=host.little_endian,
    )


# ── Host probes ────────────────────────────────────────────


def _cpu_has_vfp(cpuinfo: Path = CPUINFO_PATH) -> bool:
    """Whether a ``Features`` line in /proc/cpuinfo lists ``vfp``."""
    try:
        text = cpuinfo.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    for line in text.splitlines():
        if line.startswith("Features") and re.search(r"\bvfp\b", line):
            return True
    return False


def _lscpu_little_endian() -> bool:
    """Whether lscpu reports ``Little Endian`` byte order."""
    try:
        r = subprocess.run(
            ["lscpu"],
            capture_output=True, text=True, timeout=5,
        )
        return "Little Endian" in r.stdout
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False


def detect_host(machine: str | None = None, cpuinfo: Path = CPUINFO_PATH) -> HostArch:
    """Probe the facts needed to resolve this host's asset suffix.

    Only runs the FPU/endianness probes for machines where they matter.
    """
    machine = machine or platform.machine()
    has_fpu = _cpu_has_vfp(cpuinfo) if machine in _FPU_MACHINES else False
    little_endian = _lscpu_little_endian() if machine in _ENDIAN_MACHINES else False
    host = HostArch(machine=machine, has_fpu=has_fpu, little_endian=little_endian)
    logger.debug("Host architecture: %s", host)
    return host


# ── Asset URL ──────────────────────────────────────────────


def build_asset(version: str, suffix: str, base_url: str) -> XrayAsset:
    """The release asset for ``version`` and ``suffix`` under ``base_url``."""
    filename = f"Xray-linux-{suffix}.zip"
    return XrayAsset(
        version=version,
        suffix=suffix,
        filename=filename,
        url=f"{base_url.rstrip('/')}/{version}/{filename}",
    )
