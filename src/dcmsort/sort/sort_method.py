"""
File Placement.

This module turns a plan of (source, destination) pairs into filesystem
effects: copying, moving or hard-linking files into the sorted tree.

Classes
-------
FileAction(Enum)
    Enum for file actions: COPY, MOVE and HARDLINK.
ExecutionResult
    What an `execute` run placed (or would place, in a dry run).

Functions
---------
unique_path(destination: Path, taken: Collection[Path] = ...) -> Path
    First free `stem_N.ext` variant of a destination.
handle_file(source_path: Path, resolved_path: Path, action: FileAction) -> bool
    Place a single file, creating parent directories.
execute(entries, action, dry_run) -> ExecutionResult
    Place every file of a plan.

Notes
-----
Hardlinks:
    A hard link is an additional reference to the same data on the disk. Both
    the original file and the hard link share the same inode. Hard links
    cannot span filesystems, so a failed link falls back to a copy.

Moves:
    A rename is atomic but only within a filesystem. A failed rename
    falls back to copying and then deleting the source.

Existing files are never overwritten: `unique_path` probes
`name_1.dcm`, `name_2.dcm`, ... This is a check-then-act sequence and is
only safe while a single process writes to the output tree.

Examples
--------
Copy a file:
    >>> handle_file(
    ...     Path("source.dcm"),
    ...     Path("out/destination.dcm"),
    ...     action=FileAction.COPY,
    ... )
    False
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Collection, List, Optional, Set, Tuple

from dcmsort.exceptions import FileOperationError
from dcmsort.loggers import logger
from dcmsort.sort.types import ChoiceEnum

if TYPE_CHECKING:
    from dcmsort.sort.planner import PlanEntry

MAX_COLLISION_ATTEMPTS = 10_000


class FileAction(ChoiceEnum):
    COPY = "copy"
    MOVE = "move"
    HARDLINK = "hardlink"

    def handle(self, source_path: Path, resolved_path: Path) -> bool:
        """Apply the action.

        Returns
        -------
        bool
            True when the fallback had to be used.
        """
        match self:
            case FileAction.COPY:
                self.copy_file(source_path, resolved_path)
                return False
            case FileAction.MOVE:
                return self.move_file(source_path, resolved_path)
            case FileAction.HARDLINK:
                return self.create_hardlink(source_path, resolved_path)

    def copy_file(self, source_path: Path, resolved_path: Path) -> None:
        try:
            shutil.copy2(source_path, resolved_path)  # preserves metadata
        except OSError as e:
            raise FileOperationError(
                source_path, resolved_path, f"copy failed: {e}"
            ) from e

    def move_file(self, source_path: Path, resolved_path: Path) -> bool:
        try:
            source_path.rename(resolved_path)
            return False
        except OSError as rename_error:
            logger.warning(
                "Rename failed, falling back to copy and delete",
                source=source_path,
                destination=resolved_path,
                error=str(rename_error),
            )
        try:
            shutil.copy2(source_path, resolved_path)
            source_path.unlink()
        except OSError as e:
            raise FileOperationError(
                source_path, resolved_path, f"move fallback failed: {e}"
            ) from e
        return True

    def create_hardlink(self, source_path: Path, resolved_path: Path) -> bool:
        try:
            resolved_path.hardlink_to(source_path)
            return False
        except OSError as link_error:
            logger.warning(
                "Hard link failed, falling back to copy",
                source=source_path,
                destination=resolved_path,
                error=str(link_error),
            )
        try:
            shutil.copy2(source_path, resolved_path)
        except OSError as e:
            raise FileOperationError(
                source_path, resolved_path, f"hardlink fallback failed: {e}"
            ) from e
        return True


def unique_path(
    destination: Path,
    taken: Collection[Path] = frozenset(),
    max_attempts: int = MAX_COLLISION_ATTEMPTS,
) -> Path:
    """Return `destination`, or the first free `stem_N.ext` next to it.

    A path is considered used when it exists on disk or is in `taken`.
    If every candidate up to `max_attempts` is used, the original
    destination is returned.
    """

    def is_free(candidate: Path) -> bool:
        return candidate not in taken and not candidate.exists()

    if is_free(destination):
        return destination

    for i in range(1, max_attempts):
        candidate = destination.with_name(
            f"{destination.stem}_{i}{destination.suffix}"
        )
        if is_free(candidate):
            logger.info(
                "Destination exists, renamed",
                destination=destination,
                resolved=candidate,
            )
            return candidate

    logger.warning(
        "No free name found, keeping original destination",
        destination=destination,
        attempts=max_attempts,
    )
    return destination


def handle_file(
    source_path: Path,
    resolved_path: Path,
    action: FileAction | str,
) -> bool:
    """Place one file at an already resolved destination.

    Returns
    -------
    bool
        True when the action's fallback was used.

    Raises
    ------
    FileOperationError
        If the source is missing, the parent directory cannot be created,
        or both the action and its fallback fail.
    """
    action = FileAction.validate(action)

    if not source_path.exists():
        raise FileOperationError(
            source_path, resolved_path, "source does not exist"
        )

    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(
            source_path,
            resolved_path,
            f"failed to create parent directory {resolved_path.parent}: {e}",
        ) from e

    return action.handle(source_path, resolved_path)


@dataclass
class ExecutionResult:
    action: FileAction
    dry_run: bool
    placed: List[Tuple[Path, Path]] = field(default_factory=list)
    fallbacks: int = 0

    def __len__(self) -> int:
        return len(self.placed)


def execute(
    entries: "Collection[PlanEntry]",
    action: FileAction | str = FileAction.COPY,
    dry_run: bool = False,
    on_placed: Optional[Callable[[Path, Path], None]] = None,
) -> ExecutionResult:
    """Place every planned file, in plan order.

    Parameters
    ----------
    entries : Collection[PlanEntry]
        The plan.
    action : FileAction | str, default: FileAction.COPY
        How files are placed.
    dry_run : bool, default: False
        Only resolve destinations; nothing on disk is touched.
    on_placed : callable, optional
        Called with (source, destination) after each entry.

    Returns
    -------
    ExecutionResult
        The (source, resolved destination) pairs, in plan order.

    Raises
    ------
    FileOperationError
        On the first file that cannot be placed. Files already placed
        stay where they are.
    """
    action = FileAction.validate(action)
    result = ExecutionResult(action=action, dry_run=dry_run)
    claimed: Set[Path] = set()

    for entry in entries:
        resolved = unique_path(entry.destination, taken=claimed)
        claimed.add(resolved)

        if not dry_run:
            if handle_file(entry.source, resolved, action):
                result.fallbacks += 1
            logger.debug(
                "Placed file",
                action=action.value,
                source=entry.source,
                destination=resolved,
            )

        result.placed.append((entry.source, resolved))
        if on_placed is not None:
            on_placed(entry.source, resolved)

    return result
