"""Process tree builder for niri-launcher."""

import logging
from collections import defaultdict

import psutil

from niri_launcher.models import ProcessRecord, ProcessTree, ProcessTreeNode

logger = logging.getLogger(__name__)

ROOT_PARENT_PID = -1


def collect_process_records() -> list[ProcessRecord]:
    """
    Collect a (pid, parent pid) record for every visible process.

    Uses psutil.process_iter() which reads each process's status file.
    Processes that vanish mid-scan, deny access or report no parent are skipped.
    """
    records: list[ProcessRecord] = []

    for proc in psutil.process_iter(attrs=["pid", "ppid"]):
        try:
            info = proc.info
            pid = info.get("pid")
            ppid = info.get("ppid")
            if not isinstance(pid, int) or not isinstance(ppid, int):
                continue
            records.append(ProcessRecord(pid=pid, parent_pid=ppid))
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue

    return records


def _populate(
    node: ProcessTreeNode,
    records: dict[int, ProcessRecord],
    children_of: dict[int, list[int]],
) -> None:
    for child_pid in children_of.get(node.record.pid, []):
        child = ProcessTreeNode(records[child_pid])
        _populate(child, records, children_of)
        node.children.append(child)


def build_process_tree(
    root_pid: int,
    records: list[ProcessRecord] | None = None,
) -> ProcessTree:
    """
    Build the tree of processes descending from root_pid.

    The root record is synthetic, so an unknown pid still yields a tree whose
    root simply has no children.

    Args:
        root_pid: Pid the tree is rooted at.
        records: Pre-collected records. Defaults to a fresh psutil scan.
    """
    if records is None:
        records = collect_process_records()

    by_pid: dict[int, ProcessRecord] = {}
    children_of: dict[int, list[int]] = defaultdict(list)
    for record in records:
        # pid 0 reports itself as its own parent on some platforms
        if record.pid == record.parent_pid:
            continue
        by_pid[record.pid] = record
        children_of[record.parent_pid].append(record.pid)

    root = ProcessTreeNode(ProcessRecord(pid=root_pid, parent_pid=ROOT_PARENT_PID))
    _populate(root, by_pid, children_of)
    logger.debug("Built process tree for pid %d from %d records", root_pid, len(records))
    return ProcessTree(root=root)

