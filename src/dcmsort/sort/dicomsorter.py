import contextlib
from pathlib import Path
from typing import Dict, Iterator, List, Set

from rich import progress
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from dcmsort.dicom import DicomMeta, find_dicoms
from dcmsort.exceptions import DirectoryNotFoundError, SorterBaseError
from dcmsort.loggers import logger
from dcmsort.sort.planner import PlanEntry, plan_operations
from dcmsort.sort.report import write_json_report
from dcmsort.sort.scan import scan
from dcmsort.sort.sort_method import ExecutionResult, FileAction, execute
from dcmsort.sort.types import Layout, SortBy


class DICOMSorter:
    """Sort the DICOM files of a directory into a series hierarchy.

    Files are read header-only, grouped by study and series, ordered
    within each series, then placed below `output_directory` as
    ``<patient>/<study>/<series>/00001_<SOPInstanceUID>.dcm`` (depending
    on `layout`).

    Attributes
    ----------
    source_directory : Path
        The directory containing the files to be sorted.
    output_directory : Path
        The root of the sorted tree.
    dicom_files : list of Path
        Candidate files found in `source_directory`.
    """

    def __init__(
        self,
        source_directory: Path,
        output_directory: Path,
        layout: Layout | str = Layout.PATIENT_STUDY_SERIES,
        sort_by: SortBy | str = SortBy.AUTO,
        include_phi: bool = False,
        follow_symlinks: bool = False,
        num_workers: int = 1,
    ) -> None:
        self.source_directory = source_directory
        self.output_directory = output_directory
        self.layout = Layout.validate(layout)
        self.sort_by = SortBy.validate(sort_by)
        self.include_phi = include_phi
        self.num_workers = num_workers
        self._console = Console()
        self.logger = logger.bind(source_directory=self.source_directory)

        try:
            self.dicom_files = find_dicoms(
                self.source_directory, follow_symlinks=follow_symlinks
            )
        except DirectoryNotFoundError as e:
            errmsg = f"Failed to find files in {self.source_directory}."
            raise SorterBaseError(errmsg) from e
        self.logger.info(f"Found {len(self.dicom_files)} files")

        self._metas: List[DicomMeta] | None = None

    @property
    def metas(self) -> List[DicomMeta]:
        """Records of every readable DICOM file, read on first access."""
        if self._metas is None:
            self._metas = scan(self.dicom_files, n_jobs=self.num_workers)
        return self._metas

    def write_report(self, report_path: Path) -> None:
        write_json_report(report_path, self.metas)

    def plan(self) -> List[PlanEntry]:
        entries = plan_operations(
            self.metas,
            self.output_directory,
            layout=self.layout,
            sort_by=self.sort_by,
            include_phi=self.include_phi,
        )
        self.logger.info(f"Planned {len(entries)} operations")
        return entries

    def execute(
        self,
        action: FileAction | str = FileAction.COPY,
        dry_run: bool = False,
        report: Path | None = None,
    ) -> ExecutionResult:
        """Sort the files.

        Parameters
        ----------
        action : FileAction, default: FileAction.COPY
            How files are placed.
        dry_run : bool, default: False
            Print what would be done without touching the filesystem.
        report : Path, optional
            Write the JSON metadata report here, before planning.

        Raises
        ------
        FileOperationError
            If a file cannot be placed; earlier files are left in place.
        """
        action = FileAction.validate(action)

        if report is not None:
            self.write_report(report)

        entries = self.plan()

        if dry_run:
            result = execute(entries, action, dry_run=True)
            self._dry_run(result)
            return result

        with self._progress_bar() as progress_bar:
            task = progress_bar.add_task(
                f"{action.value.capitalize()} files", total=len(entries)
            )
            result = execute(
                entries,
                action,
                on_placed=lambda *_: progress_bar.update(task, advance=1),
            )

        self.logger.info(
            "Finished sorting",
            action=action.value,
            placed=len(result),
            fallbacks=result.fallbacks,
        )
        return result

    def _dry_run(self, result: ExecutionResult) -> None:
        self._console.print(
            "[bold green]:double_exclamation_mark: Dry run mode enabled. No files will be moved or copied. :double_exclamation_mark: [/bold green]"
        )
        for source, destination in result.placed:
            self._console.print(
                f"{source} -> {destination}", highlight=False, soft_wrap=True
            )

        if not result.placed:
            return

        tree = Tree(
            f":file_folder: {self.output_directory}/",
            guide_style="bold bright_blue",
        )
        self._build_tree(
            [destination for _, destination in result.placed], tree
        )
        self._console.print(
            "\n[bold]Preview of the sorted output:[/bold]\n"
        )
        self._console.print(tree)

    def _build_tree(
        self,
        paths: List[Path],
        tree: Tree,
        max_children: int = 3,
    ) -> None:
        """
        Build a tree view of planned destinations below the output root.

        Each directory shows at most `max_children` entries; the rest are
        folded into a "..." placeholder.
        """
        relative = sorted(
            path.relative_to(self.output_directory) for path in paths
        )
        depth_counts: Dict[int, Set[str]] = {}
        for path in relative:
            # directories only; file names are not counted
            for depth, part in enumerate(path.parts[:-1]):
                depth_counts.setdefault(depth, set()).add(part)

        node_map: Dict[Path, Tree] = {Path(): tree}
        for path in relative:
            parts = list(path.parts)
            for depth, part in enumerate(parts):
                current_path = Path(*parts[: depth + 1])
                if current_path in node_map:
                    continue

                parent_node = node_map[Path(*parts[:depth])]
                if len(parent_node.children) < max_children:
                    node_map[current_path] = parent_node.add(part)
                    continue

                if not any(
                    child.label == "..." for child in parent_node.children
                ):
                    parent_node.add("...")
                break

        def add_counts(node: Tree, depth: int) -> None:
            if node.label != "..." and depth in depth_counts:
                node.label = Text.assemble(
                    node.label,  # type: ignore
                    Text(
                        f" ({len(depth_counts[depth])} unique)",
                        style="bold green",
                    ),
                )
            for child in node.children:
                add_counts(child, depth + 1)

        for child in tree.children:
            add_counts(child, 0)

    @contextlib.contextmanager
    def _progress_bar(self) -> Iterator[progress.Progress]:
        """Context manager for creating a progress bar."""
        with progress.Progress(
            "[progress.description]{task.description}",
            progress.BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            progress.MofNCompleteColumn(),
            "Time elapsed:",
            progress.TimeElapsedColumn(),
            console=self._console,
            transient=True,
        ) as progress_bar:
            yield progress_bar
