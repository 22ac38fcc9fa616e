from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from dcmsort.dicom.metadata import DicomMeta
from dcmsort.loggers import logger
from dcmsort.sort.grouping import group_by_series
from dcmsort.sort.ordering import order_group
from dcmsort.sort.path_builder import build_destination
from dcmsort.sort.types import Layout, SortBy


@dataclass(frozen=True)
class PlanEntry:
    """One planned placement: `source` goes to `destination`."""

    source: Path
    destination: Path
    meta: DicomMeta


def plan_operations(
    metas: Sequence[DicomMeta],
    out_dir: Path,
    layout: Layout = Layout.PATIENT_STUDY_SERIES,
    sort_by: SortBy = SortBy.AUTO,
    include_phi: bool = False,
) -> List[PlanEntry]:
    """Group, order and name every record.

    Needs the complete metadata set: the ordering signal of a series
    depends on all of its members.

    Parameters
    ----------
    metas : Sequence[DicomMeta]
        Every successfully read record.
    out_dir : Path
        The output root.
    layout : Layout, default: Layout.PATIENT_STUDY_SERIES
        Directory levels below `out_dir`.
    sort_by : SortBy, default: SortBy.AUTO
        Ordering signal policy.
    include_phi : bool, default: False
        Allow names, dates and descriptions in directory names.

    Returns
    -------
    List[PlanEntry]
        Entries grouped by series (series in key order), each series
        in its sorted order.
    """
    groups = group_by_series(metas)
    logger.debug("Grouped records", records=len(metas), groups=len(groups))

    plan: List[PlanEntry] = []
    for key in sorted(groups):
        ordered = order_group(groups[key], sort_by)
        for index, meta in enumerate(ordered):
            destination = build_destination(
                out_dir, layout, include_phi, meta, index
            )
            plan.append(PlanEntry(meta.path, destination, meta))

    return plan
