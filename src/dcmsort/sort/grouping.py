from collections import defaultdict
from typing import Dict, Iterable, List, NamedTuple

from dcmsort.dicom.metadata import DicomMeta

UNKNOWN_STUDY = "UNKNOWN_STUDY"
UNKNOWN_SERIES = "UNKNOWN_SERIES"


class GroupKey(NamedTuple):
    study: str
    series: str


def group_key(meta: DicomMeta) -> GroupKey:
    return GroupKey(
        study=meta.study_id if meta.study_id is not None else UNKNOWN_STUDY,
        series=meta.series_id if meta.series_id is not None else UNKNOWN_SERIES,
    )


def group_by_series(metas: Iterable[DicomMeta]) -> Dict[GroupKey, List[DicomMeta]]:
    """Bucket records by (StudyInstanceUID, SeriesInstanceUID).

    Records missing an identifier all share the same sentinel bucket, so
    unrelated files missing the same UIDs end up in one group. Order
    inside a bucket is arrival order.
    """
    groups: Dict[GroupKey, List[DicomMeta]] = defaultdict(list)
    for meta in metas:
        groups[group_key(meta)].append(meta)
    return dict(groups)
