"""
Pydantic argument schemas for every tool.

Callers use camelCase field names (``vgName``, ``lvType``); code reads the
snake_case attributes. Unknown fields are rejected, defaults are applied
here so that command builders always see a fully populated model.
"""

import os
import shlex
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Type, TypeVar

from pydantic import (AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, ValidationError,
                      ValidationInfo, field_validator, model_validator)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from lvm_toolkit.cli.lib.exceptions import ArgumentValidationError, Violation
from lvm_toolkit.cli.lib.validators import (split_lv_path, validate_config_node, validate_name, validate_operand,
                                            validate_rate, validate_size, validate_size_delta, validate_tag)

DEFAULT_LVM_CONF_PATH = "/etc/lvm/lvm.conf"

Name = Annotated[str, AfterValidator(validate_name)]
Operand = Annotated[str, AfterValidator(validate_operand)]
Size = Annotated[str, AfterValidator(validate_size)]
SizeDelta = Annotated[str, AfterValidator(validate_size_delta)]
Rate = Annotated[str, AfterValidator(validate_rate)]
Tag = Annotated[str, AfterValidator(validate_tag)]
ConfigNode = Annotated[str, AfterValidator(validate_config_node)]


def _reject_bool(value: Any) -> Any:
    # Literal[0, 1, ...] would otherwise take true/false as 1/0
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


RaidLevel = Annotated[Literal[0, 1, 4, 5, 6, 10], BeforeValidator(_reject_bool)]
MetadataCopies = Annotated[Literal[0, 1, 2], BeforeValidator(_reject_bool)]


class LvType(str, Enum):
    """Logical volume types."""

    LINEAR = "linear"
    STRIPED = "striped"
    MIRROR = "mirror"
    RAID0 = "raid0"
    RAID1 = "raid1"
    RAID4 = "raid4"
    RAID5 = "raid5"
    RAID6 = "raid6"
    RAID10 = "raid10"
    THIN = "thin"
    THIN_POOL = "thin-pool"
    CACHE = "cache"
    CACHE_POOL = "cache-pool"

    @property
    def is_raid(self) -> bool:
        return self.value.startswith("raid")


class Permission(str, Enum):
    """LV access permission."""

    READ_WRITE = "rw"
    READ_ONLY = "r"


class WriteMostly(str, Enum):
    """RAID1 write-mostly flag."""

    NO = "N"
    YES = "Y"


class AllocPolicy(str, Enum):
    """Extent allocation policy."""

    INHERIT = "inherit"
    CONTIGUOUS = "contiguous"
    CLING = "cling"
    NORMAL = "normal"
    ANYWHERE = "anywhere"


class CacheMode(str, Enum):
    """dm-cache write mode."""

    WRITEBACK = "writeback"
    WRITETHROUGH = "writethrough"


class CacheType(str, Enum):
    """Caching target."""

    CACHE = "cache"
    WRITECACHE = "writecache"


class SyncAction(str, Enum):
    """RAID sync actions."""

    CHECK = "check"
    REPAIR = "repair"


class ToolArgs(BaseModel):
    """Base class for tool argument schemas."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True)


class ConfirmableArgs(ToolArgs):
    """Arguments of an irreversible operation."""

    force: bool = Field(False, description="Force removal")
    confirm: bool = Field(False, description="Confirm before deleting")


# LV Models


class LvCreateArgs(ToolArgs):
    """Arguments for creating a logical volume."""

    vg_name: Name = Field(..., description="Volume Group name")
    lv_name: Name = Field(..., description="Logical Volume name")
    size: Size = Field(..., description="Size (e.g., 10G, 500M)")
    lv_type: LvType = Field(LvType.LINEAR, description="Logical Volume type")
    stripes: Optional[StrictInt] = Field(None, description="Number of stripes for striped LV", ge=1)
    stripe_size: Optional[Size] = Field(None, description="Stripe size (e.g., 64K)")
    mirrors: Optional[StrictInt] = Field(None, description="Number of mirrors for mirrored LV", ge=1)
    raid_level: Optional[RaidLevel] = Field(None, description="RAID level (0, 1, 4, 5, 6, 10)")
    raid_integrity: Optional[bool] = Field(None, description="Add integrity layer")
    region_size: Optional[Size] = Field(None, description="RAID region size (e.g., 2M)")
    min_recovery_rate: Optional[Rate] = Field(None, description="Minimum recovery rate (e.g., 128KiB/s)")
    max_recovery_rate: Optional[Rate] = Field(None, description="Maximum recovery rate (e.g., 2MiB/s)")
    write_mostly: Optional[WriteMostly] = Field(None, description="Write-mostly flag")
    thin_pool: Optional[Name] = Field(None, description="Thin pool name (for thin LVs)")
    snapshot_of: Optional[Name] = Field(None, description="LV to create snapshot from")
    chunk_size: Optional[Size] = Field(None, description="Chunk size (e.g., 512K)")
    filesystem: Optional[Name] = Field(None, description="Filesystem type (ext4, xfs, etc.)")
    tags: Optional[List[Tag]] = Field(None, description="Tags to assign to LV")
    contiguous: Optional[bool] = Field(None, description="Allocate contiguous extents")
    permission: Optional[Permission] = Field(None, description="LV permission")
    alloc_policy: Optional[AllocPolicy] = Field(None, description="Allocation policy")

    @field_validator("raid_level")
    def validate_raid_level(cls, v: Optional[int], info: ValidationInfo) -> Optional[int]:
        lv_type = info.data.get("lv_type")
        if v is not None and lv_type is not None and lv_type.is_raid and lv_type.value != f"raid{v}":
            raise ValueError(f"RAID level {v} does not match lvType '{lv_type.value}'")
        return v


class LvExtendArgs(ToolArgs):
    """Arguments for extending a logical volume."""

    lv_path: Operand = Field(..., description="LV path (e.g., /dev/vg0/lv0)")
    size: Optional[Size] = Field(None, description="Target size (e.g., 20G)")
    size_add: Optional[SizeDelta] = Field(None, description="Size to add (e.g., +10G)")
    size_percent: Optional[StrictInt] = Field(None, description="Percentage of VG (e.g., 50)", ge=1, le=100)
    resize_fs: bool = Field(False, description="Resize filesystem as well")

    @model_validator(mode="after")
    def require_size(self) -> "LvExtendArgs":
        if self.size is None and self.size_add is None and self.size_percent is None:
            raise ValueError("One of size, sizeAdd or sizePercent is required")
        return self


class LvReduceArgs(ToolArgs):
    """Arguments for reducing a logical volume."""

    lv_path: Operand = Field(..., description="LV path (e.g., /dev/vg0/lv0)")
    size: Size = Field(..., description="Target size (e.g., 5G)")
    resize_fs: bool = Field(False, description="Resize filesystem as well")


class LvRemoveArgs(ConfirmableArgs):
    """Arguments for removing a logical volume."""

    lv_path: Operand = Field(..., description="LV path (e.g., /dev/vg0/lv0)")


class LvChangeArgs(ToolArgs):
    """Arguments for changing LV attributes."""

    lv_path: Operand = Field(..., description="LV path (e.g., /dev/vg0/lv0)")
    activate: Optional[bool] = Field(None, description="Activate LV")
    permission: Optional[Permission] = Field(None, description="LV permission")
    add_tag: Optional[Tag] = Field(None, description="Tag to add")
    del_tag: Optional[Tag] = Field(None, description="Tag to delete")


class LvDisplayArgs(ToolArgs):
    lv_path: Optional[Operand] = Field(None, description="Specific LV path")


class ReportArgs(ToolArgs):
    """Arguments for the lvs/vgs/pvs report commands."""

    options: Optional[str] = Field(None, description="Additional options (e.g., '-o +devices')")

    @field_validator("options")
    def validate_options(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if "\n" in v or "\x00" in v:
            raise ValueError("Options must be a single line")
        shlex.split(v)
        return v


# VG Models


class VgCreateArgs(ToolArgs):
    """Arguments for creating a volume group."""

    vg_name: Name = Field(..., description="Volume Group name")
    physical_volumes: List[Operand] = Field(..., description="PV list", min_length=1)
    max_pv: Optional[StrictInt] = Field(None, description="Maximum number of PVs", ge=1)
    max_lv: Optional[StrictInt] = Field(None, description="Maximum number of LVs", ge=1)
    extent_size: Optional[Size] = Field(None, description="Extent size (e.g., 4M, 8M)")
    force: bool = Field(False, description="Force creation")


class VgExtendArgs(ToolArgs):
    vg_name: Name = Field(..., description="Volume Group name")
    physical_volumes: List[Operand] = Field(..., description="PV list to add", min_length=1)


class VgRemoveArgs(ConfirmableArgs):
    vg_name: Name = Field(..., description="Volume Group name")


class VgDisplayArgs(ToolArgs):
    vg_name: Optional[Name] = Field(None, description="Specific VG name")


# PV Models


class PvCreateArgs(ToolArgs):
    """Arguments for initializing a physical volume."""

    device: Operand = Field(..., description="Device path (e.g., /dev/sdb1)")
    data_alignment: Optional[StrictInt] = Field(None, description="Data alignment in KB", ge=1)
    metadata_size: Optional[StrictInt] = Field(None, description="Metadata size in KB", ge=1)
    metadatacopies: Optional[MetadataCopies] = Field(None, description="Metadata copies (0, 1, 2)")
    force: bool = Field(False, description="Force creation")


class PvRemoveArgs(ConfirmableArgs):
    pv_name: Operand = Field(..., description="PV name")


class PvDisplayArgs(ToolArgs):
    pv_name: Optional[Operand] = Field(None, description="Specific PV name")


# Cache and RAID Models


class CacheCreateArgs(ToolArgs):
    """Arguments for attaching a cache to an origin LV."""

    origin: Operand = Field(..., description="Origin LV path")
    fast_pvs: Optional[List[Operand]] = Field(None, description="Fast PVs (SSD/NVMe)")
    cache_pool: Optional[Operand] = Field(None, description="Existing cache pool LV (skips pool creation)")
    pool_size: Size = Field("1G", description="Size of the cache pool created on the fast PVs")
    block_size: Optional[Size] = Field(None, description="Block size (e.g., 64K, 256K)")
    cache_mode: Optional[CacheMode] = Field(None, description="Cache mode")
    cache_type: CacheType = Field(CacheType.CACHE, description="Cache type")

    @model_validator(mode="after")
    def require_fast_device(self) -> "CacheCreateArgs":
        if self.cache_type == CacheType.WRITECACHE:
            if not self.fast_pvs:
                raise ValueError("fastPvs is required for writecache")
        elif self.cache_pool is None:
            if not self.fast_pvs:
                raise ValueError("Either fastPvs or cachePool is required")
            # The new pool is created in the origin's VG
            if split_lv_path(self.origin)[0] is None:
                raise ValueError("origin must name its VG (vg/lv or /dev/vg/lv) when cachePool is not given")
        return self


class SplitCacheArgs(ToolArgs):
    lv_path: Operand = Field(..., description="LV path")
    force: bool = Field(False, description="Force split (skip 5+ hour flush)")


class RaidScrubArgs(ToolArgs):
    lv_path: Operand = Field(..., description="LV path")
    syncaction: SyncAction = Field(..., description="Sync action")


class RaidRecoveryRateArgs(ToolArgs):
    lv_path: Operand = Field(..., description="LV path")
    min_recovery_rate: Optional[Rate] = Field(None, description="Minimum recovery rate (e.g., 128KiB/s)")
    max_recovery_rate: Optional[Rate] = Field(None, description="Maximum recovery rate (e.g., 2MiB/s)")

    @model_validator(mode="after")
    def require_rate(self) -> "RaidRecoveryRateArgs":
        if self.min_recovery_rate is None and self.max_recovery_rate is None:
            raise ValueError("One of minRecoveryRate or maxRecoveryRate is required")
        return self


# Snapshot and thin pool Models


class SnapshotCreateArgs(ToolArgs):
    """Arguments for creating a snapshot."""

    snapshot_name: Name = Field(..., description="Snapshot name")
    source_lv_path: Operand = Field(..., description="Source LV path")
    size: Size = Field(..., description="Snapshot size")
    chunk_size: Optional[Size] = Field(None, description="Chunk size (e.g., 512K)")
    thin: bool = Field(False, description="Thin snapshot")


class ListSnapshotsArgs(ToolArgs):
    vg_name: Optional[Name] = Field(None, description="VG name")


class SnapshotRemoveArgs(ConfirmableArgs):
    snapshot_path: Operand = Field(..., description="Snapshot LV path")


class ThinPoolCreateArgs(ToolArgs):
    """Arguments for creating a thin pool."""

    pool_name: Name = Field(..., description="Pool name")
    vg_name: Name = Field(..., description="VG name")
    size: Size = Field(..., description="Pool size")
    chunk_size: Optional[Size] = Field(None, description="Chunk size (e.g., 64K)")
    metadata_size: Optional[Size] = Field(None, description="Metadata size (e.g., 1G)")
    zero: bool = Field(False, description="Zero initial blocks")


# Config Models


def _validate_conf_path(v: str) -> str:
    validate_operand(v)
    if not os.path.isabs(v) or os.path.basename(v) != "lvm.conf":
        raise ValueError("Config path must be an absolute path to an lvm.conf file")
    return v


ConfPath = Annotated[str, AfterValidator(_validate_conf_path)]


class ConfReadArgs(ToolArgs):
    """Arguments for reading lvm.conf."""

    path: Optional[ConfPath] = Field(None, description=f"Config file path (default: {DEFAULT_LVM_CONF_PATH})")
    section: Optional[ConfigNode] = Field(None, description="Section name")
    key: Optional[ConfigNode] = Field(None, description="Key name")

    @field_validator("key")
    def validate_key(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is not None and info.data.get("section") is None:
            raise ValueError("A key requires a section")
        return v


class ConfWriteArgs(ToolArgs):
    """Arguments for describing an lvm.conf change."""

    section: ConfigNode = Field(..., description="Section name")
    key: ConfigNode = Field(..., description="Key name")
    value: str = Field(..., description="Value")
    path: Optional[ConfPath] = Field(None, description="Config file path")
    comment: Optional[str] = Field(None, description="Comment")
    backup: bool = Field(True, description="Create backup")


ArgsT = TypeVar("ArgsT", bound=ToolArgs)

_KIND_BY_ERROR_TYPE = {
    "missing": "missing",
    "extra_forbidden": "unexpected",
    "enum": "enum",
    "literal_error": "enum",
}


def _field_name(loc: tuple) -> str:
    name = ""
    for part in loc:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name = f"{name}.{part}" if name else str(part)
    return name


def _violation(error: dict) -> Violation:
    error_type = error["type"]
    kind = _KIND_BY_ERROR_TYPE.get(error_type)
    if kind is None:
        kind = "type" if error_type.endswith(("_type", "_parsing")) else "value"

    message = error["msg"]
    if error_type == "value_error" and "error" in error.get("ctx", {}):
        message = str(error["ctx"]["error"])
    return Violation(field=_field_name(error["loc"]), kind=kind, message=message)


def validate_args(schema: Type[ArgsT], arguments: Any) -> ArgsT:
    """
    Validate raw tool arguments against a schema.

    Args:
        schema: ToolArgs subclass
        arguments: Raw argument mapping from the caller (None means no arguments)

    Returns:
        Validated, default-filled model

    Raises:
        ArgumentValidationError: With one violation per failed field
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ArgumentValidationError([Violation(field="", kind="type", message="Arguments must be an object")])

    try:
        return schema.model_validate(dict(arguments))
    except ValidationError as e:
        raise ArgumentValidationError([_violation(err) for err in e.errors()]) from e
