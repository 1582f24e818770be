"""
Input validation functions.

Each validator returns the value unchanged or raises ValueError. Values that
pass are safe to place verbatim into an lvm2 argument vector.
"""

import re
from typing import Optional, Tuple

NAME_RE = re.compile(r"^[a-zA-Z0-9._+][a-zA-Z0-9._+-]*$")
SIZE_RE = re.compile(r"^[+-]?\d+(\.\d+)?[bBsSkKmMgGtTpPeE]?$")
SIZE_DELTA_RE = re.compile(r"^\+?\d+(\.\d+)?[bBsSkKmMgGtTpPeE]?$")
RATE_RE = re.compile(r"^\d+(\.\d+)?([bBsSkKmMgGtTpPeE]([iI][bB])?)?(/[sS])?$")
TAG_RE = re.compile(r"^[a-zA-Z0-9_+.\-/=!:&#]+$")
CONFIG_NODE_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

MAX_NAME_LENGTH = 127


def validate_name(name: str) -> str:
    """
    Validate an LVM object name (VG, LV, pool, snapshot).

    Args:
        name: Name to validate

    Returns:
        The name

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")

    if name in (".", ".."):
        raise ValueError("Name cannot be '.' or '..'")

    # LVM allows alphanumerics, dots, underscores, hyphens and plus signs
    if not NAME_RE.match(name):
        raise ValueError(
            "Name must not start with a hyphen and may contain only alphanumeric, dots, underscores, "
            "plus signs or hyphens"
        )
    return name


def validate_operand(value: str) -> str:
    """
    Validate a positional operand such as an LV path or a device path.

    Args:
        value: Operand to validate (e.g., "/dev/vg0/lv0", "vg0/lv0", "/dev/sdb1")

    Returns:
        The operand

    Raises:
        ValueError: If operand is empty, looks like a flag, or contains whitespace
    """
    if not value:
        raise ValueError("Value cannot be empty")

    if value.startswith("-"):
        raise ValueError("Value must not start with '-'")

    if any(ch.isspace() or not ch.isprintable() for ch in value):
        raise ValueError("Value must not contain whitespace or control characters")
    return value


def validate_size(size: str) -> str:
    """
    Validate a size string (e.g., "10G", "500M", "1.5T", "+10G", "-5G").

    The magnitude is not parsed; lvm2 interprets the units and any relative
    sign.

    Raises:
        ValueError: If size is not a number with an optional LVM unit
    """
    if not SIZE_RE.match(size):
        raise ValueError("Size must be an optionally signed number with an optional unit (e.g., 10G, +10G, -5G)")
    return size


def validate_size_delta(size: str) -> str:
    """
    Validate a size increment (e.g., "+10G" or "10G").

    Raises:
        ValueError: If size is not an optionally '+'-prefixed size
    """
    if not SIZE_DELTA_RE.match(size):
        raise ValueError("Size increment must be a size with an optional '+' prefix (e.g., +10G)")
    return size


def validate_rate(rate: str) -> str:
    """
    Validate a RAID recovery rate (e.g., "128KiB/s", "2MiB/s", "512k").

    Raises:
        ValueError: If rate is invalid
    """
    if not RATE_RE.match(rate):
        raise ValueError("Rate must be a number with an optional unit (e.g., 128KiB/s, 2MiB/s)")
    return rate


def validate_tag(tag: str) -> str:
    """
    Validate an LVM tag.

    Raises:
        ValueError: If tag is empty or contains characters LVM rejects
    """
    if not tag:
        raise ValueError("Tag cannot be empty")

    if tag.startswith("-"):
        raise ValueError("Tag must not start with '-'")

    if not TAG_RE.match(tag):
        raise ValueError("Tag may contain only alphanumeric and _ + . - / = ! : & # characters")
    return tag


def validate_config_node(node: str) -> str:
    """
    Validate an lvm.conf section or key name (e.g., "devices", "filter").

    Raises:
        ValueError: If node is not an identifier
    """
    if not CONFIG_NODE_RE.match(node):
        raise ValueError("Configuration section and key names must be identifiers (e.g., devices, filter)")
    return node


def split_lv_path(lv_path: str) -> Tuple[Optional[str], str]:
    """
    Split an LV reference into (vg_name, lv_name).

    Accepts "/dev/vg/lv", "vg/lv" or a bare "lv". vg_name is None for a bare
    name and for "/dev/mapper/..." paths, whose VG cannot be read back.
    """
    parts = [p for p in lv_path.split("/") if p]
    if parts and parts[0] == "dev" and lv_path.startswith("/"):
        parts = parts[1:]
    if parts and parts[0] == "mapper":
        return None, parts[-1]
    if len(parts) >= 2:
        return parts[-2], parts[-1]
    return None, parts[-1] if parts else lv_path
