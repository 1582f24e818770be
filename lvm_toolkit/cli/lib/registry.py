"""
Tool registry and dispatch.

Maps external tool names to their argument schema, command builder and
operation, validates raw arguments, and wraps every outcome in the uniform
envelope ``{"request_id", "status", "data" | "error"}``.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from lvm_toolkit.cli.lib import lvm, operations
from lvm_toolkit.cli.lib.exceptions import ArgumentValidationError, UnknownToolError
from lvm_toolkit.cli.lib.executor import Executor
from lvm_toolkit.cli.lib.guard import ConfirmationPrompt
from lvm_toolkit.cli.lib.lvm import CommandLine
from lvm_toolkit.cli.lib.schemas import (CacheCreateArgs, ConfReadArgs, ConfWriteArgs, ListSnapshotsArgs,
                                         LvChangeArgs, LvCreateArgs, LvDisplayArgs, LvExtendArgs, LvReduceArgs,
                                         LvRemoveArgs, PvCreateArgs, PvDisplayArgs, PvRemoveArgs,
                                         RaidRecoveryRateArgs, RaidScrubArgs, ReportArgs, SnapshotCreateArgs,
                                         SnapshotRemoveArgs, SplitCacheArgs, ThinPoolCreateArgs, ToolArgs,
                                         VgCreateArgs, VgDisplayArgs, VgExtendArgs, VgRemoveArgs, validate_args)

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_CONFIRM = "confirm"
STATUS_ERROR = "error"

ERROR_VALIDATION = "VALIDATION_ERROR"
ERROR_UNKNOWN_TOOL = "UNKNOWN_TOOL"
ERROR_INTERNAL = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool.

    Attributes:
        name: External tool name (e.g. "lvm_lvcreate")
        description: One-line description shown to callers
        schema: Argument schema
        handler: Operation ``fn(args, executor)``
        build: Pure command builder ``fn(args) -> [CommandLine]``
        destructive: Whether the tool requires confirmation
    """

    name: str
    description: str
    schema: Type[ToolArgs]
    handler: Callable[[Any, Executor], Any]
    build: Callable[[Any], List[CommandLine]]
    destructive: bool = False

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "destructive": self.destructive,
            "inputSchema": self.schema.model_json_schema(by_alias=True),
        }


def _tool(name, description, schema, handler, build, destructive=False) -> ToolSpec:
    return ToolSpec(name, description, schema, handler, build, destructive)


TOOLS: Dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        _tool(
            "lvm_lvcreate",
            "Create a Logical Volume with various types (linear, striped, mirror, RAID, thin, cache)",
            LvCreateArgs,
            operations.lvcreate,
            lvm.build_lvcreate,
        ),
        _tool(
            "lvm_lvextend",
            "Extend a Logical Volume with optional filesystem resize",
            LvExtendArgs,
            operations.lvextend,
            lvm.build_lvextend,
        ),
        _tool(
            "lvm_lvreduce",
            "Reduce a Logical Volume with optional filesystem resize",
            LvReduceArgs,
            operations.lvreduce,
            lvm.build_lvreduce,
        ),
        _tool(
            "lvm_lvremove", "Remove a Logical Volume", LvRemoveArgs, operations.lvremove, lvm.build_lvremove, True
        ),
        _tool(
            "lvm_lvchange",
            "Change LV attributes (activation, permission, tags)",
            LvChangeArgs,
            operations.lvchange,
            lvm.build_lvchange,
        ),
        _tool(
            "lvm_lvdisplay",
            "Display detailed LV information",
            LvDisplayArgs,
            operations.lvdisplay,
            lvm.build_lvdisplay,
        ),
        _tool("lvm_lvs", "List all Logical Volumes", ReportArgs, operations.lvs, lvm.build_lvs),
        _tool("lvm_vgcreate", "Create a Volume Group", VgCreateArgs, operations.vgcreate, lvm.build_vgcreate),
        _tool("lvm_vgextend", "Extend VG by adding PVs", VgExtendArgs, operations.vgextend, lvm.build_vgextend),
        _tool(
            "lvm_vgremove", "Remove a Volume Group", VgRemoveArgs, operations.vgremove, lvm.build_vgremove, True
        ),
        _tool(
            "lvm_vgdisplay",
            "Display detailed VG information",
            VgDisplayArgs,
            operations.vgdisplay,
            lvm.build_vgdisplay,
        ),
        _tool("lvm_vgs", "List all Volume Groups", ReportArgs, operations.vgs, lvm.build_vgs),
        _tool("lvm_pvcreate", "Create a Physical Volume", PvCreateArgs, operations.pvcreate, lvm.build_pvcreate),
        _tool(
            "lvm_pvremove", "Remove a Physical Volume", PvRemoveArgs, operations.pvremove, lvm.build_pvremove, True
        ),
        _tool(
            "lvm_pvdisplay",
            "Display detailed PV information",
            PvDisplayArgs,
            operations.pvdisplay,
            lvm.build_pvdisplay,
        ),
        _tool("lvm_pvs", "List all Physical Volumes", ReportArgs, operations.pvs, lvm.build_pvs),
        _tool(
            "lvm_cache_create",
            "Create cache (dm-cache or dm-writecache) for LV",
            CacheCreateArgs,
            operations.cache_create,
            lvm.build_cache_create,
        ),
        _tool(
            "lvm_splitcache",
            "Split cache with force option (skip 5+ hour flush)",
            SplitCacheArgs,
            operations.splitcache,
            lvm.build_splitcache,
        ),
        _tool(
            "lvm_raidscrub",
            "Start RAID consistency check/scrub",
            RaidScrubArgs,
            operations.raidscrub,
            lvm.build_raidscrub,
        ),
        _tool(
            "lvm_setraidrecoveryrate",
            "Change RAID recovery rate on-the-fly",
            RaidRecoveryRateArgs,
            operations.setraidrecoveryrate,
            lvm.build_setraidrecoveryrate,
        ),
        _tool(
            "lvm_snapshot_create",
            "Create snapshot (normal or thin)",
            SnapshotCreateArgs,
            operations.snapshot_create,
            lvm.build_snapshot_create,
        ),
        _tool(
            "lvm_listsnapshots",
            "List all snapshots with details",
            ListSnapshotsArgs,
            operations.listsnapshots,
            lvm.build_listsnapshots,
        ),
        _tool(
            "lvm_removesnapshot",
            "Remove a snapshot logical volume",
            SnapshotRemoveArgs,
            operations.removesnapshot,
            lvm.build_removesnapshot,
            True,
        ),
        _tool(
            "lvm_thinpool_create",
            "Create thin pool with chunk size and metadata options",
            ThinPoolCreateArgs,
            operations.thinpool_create,
            lvm.build_thinpool_create,
        ),
        _tool(
            "lvm_conf_read",
            "Read lvm.conf (full file, section, or specific key)",
            ConfReadArgs,
            operations.conf_read,
            lvm.build_conf_read,
        ),
        _tool(
            "lvm_conf_write",
            "Describe an lvm.conf change with automatic backup (the file is not edited)",
            ConfWriteArgs,
            operations.conf_write,
            lvm.build_conf_write,
        ),
    )
}


def error_envelope(request_id: str, code: str, message: str, details: Optional[dict] = None) -> Dict[str, Any]:
    return {
        "request_id": request_id,
        "status": STATUS_ERROR,
        "error": {"code": code, "message": message, "details": details or {}},
    }


def result_status(result: Any) -> str:
    if isinstance(result, ConfirmationPrompt):
        return STATUS_CONFIRM
    return STATUS_OK if result.success else STATUS_FAILED


class Dispatcher:
    """
    Validates and runs tool calls against an injected Executor.

    The executor is fixed at construction; create one Dispatcher per
    executor rather than swapping executors on a shared instance.
    """

    def __init__(self, executor: Executor, tools: Optional[Mapping[str, ToolSpec]] = None):
        self.executor = executor
        self.tools = dict(TOOLS if tools is None else tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [spec.describe() for spec in self.tools.values()]

    def get(self, name: str) -> ToolSpec:
        try:
            return self.tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def preview(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> List[CommandLine]:
        """
        Validate arguments and build the command lines without running them.

        Raises:
            UnknownToolError: If the tool does not exist
            ArgumentValidationError: If the arguments are invalid
        """
        spec = self.get(name)
        return spec.build(validate_args(spec.schema, arguments))

    def run(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Validate arguments and run the tool.

        Returns:
            ExecutionResult, ConfirmationPrompt or ConfigChange

        Raises:
            UnknownToolError: If the tool does not exist
            ArgumentValidationError: If the arguments are invalid
        """
        spec = self.get(name)
        args = validate_args(spec.schema, arguments)
        return spec.handler(args, self.executor)

    def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a tool and wrap the outcome in a response envelope.

        Never raises: validation errors, unknown tools and unexpected
        exceptions all become ``status="error"`` envelopes.
        """
        request_id = str(uuid.uuid4())
        try:
            result = self.run(name, arguments)
        except ArgumentValidationError as e:
            logger.info("Rejected %s call: %s", name, e.message)
            return error_envelope(
                request_id,
                ERROR_VALIDATION,
                e.message,
                {"violations": [v.to_dict() for v in e.violations]},
            )
        except UnknownToolError as e:
            return error_envelope(request_id, ERROR_UNKNOWN_TOOL, e.message)
        except Exception as e:
            logger.exception("Tool %s failed (request_id=%s)", name, request_id)
            return error_envelope(request_id, ERROR_INTERNAL, str(e))

        return {"request_id": request_id, "status": result_status(result), "data": {"result": result.to_dict()}}
