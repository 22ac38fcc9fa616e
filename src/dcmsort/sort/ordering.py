"""Ordering of the files inside one series.

Two signals are available: the slice position projected on the stack
normal (`DicomMeta.geom_order`) and InstanceNumber. The signal is chosen
once per group. Ties, and records lacking the chosen signal, are settled
by the stable identifier (SOPInstanceUID or file name) and finally by
the full path, so no two distinct records ever compare equal.
"""

from typing import Sequence, Tuple

from dcmsort.dicom.metadata import DicomMeta
from dcmsort.sort.types import SortBy

SortKey = Tuple[int, float, str, str]


def use_geometry(group: Sequence[DicomMeta], sort_by: SortBy) -> bool:
    match sort_by:
        case SortBy.GEOMETRY:
            return True
        case SortBy.INSTANCE:
            return False
        case SortBy.AUTO:
            # a single record without usable geometry demotes the whole group
            return all(meta.has_geometry for meta in group)


def sort_key(meta: DicomMeta, geometry: bool) -> SortKey:
    signal = meta.geom_order() if geometry else meta.instance_number
    # records missing the signal go after those that have it
    missing = 1 if signal is None else 0
    return (missing, float(signal or 0), meta.stable_id(), str(meta.path))


def compare(a: DicomMeta, b: DicomMeta, geometry: bool) -> int:
    """Three-way comparison matching the order produced by `order_group`."""
    key_a, key_b = sort_key(a, geometry), sort_key(b, geometry)
    return (key_a > key_b) - (key_a < key_b)


def order_group(group: Sequence[DicomMeta], sort_by: SortBy) -> list[DicomMeta]:
    """Return the records of one group in their final order.

    Parameters
    ----------
    group : Sequence[DicomMeta]
        All records sharing one `GroupKey`.
    sort_by : SortBy
        `GEOMETRY` and `INSTANCE` force a signal; `AUTO` uses geometry
        only when every record in the group has it.
    """
    geometry = use_geometry(group, sort_by)
    return sorted(group, key=lambda meta: sort_key(meta, geometry))
