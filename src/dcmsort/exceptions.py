from pathlib import Path


class DirectoryNotFoundError(Exception):
    pass


####################################################################################################
# Sorting specific exceptions


class DicomSortError(Exception):
    """Base exception for DICOM sorting errors."""

    def __init__(
        self, message: str = "An error occurred during DICOM sorting"
    ) -> None:
        super().__init__(message)


class SorterBaseError(DicomSortError):
    """Raised when the sorter cannot be set up for a source directory."""

    def __init__(
        self, message: str = "An error occurred during sorting"
    ) -> None:
        super().__init__(message)


class FileOperationError(DicomSortError):
    """Raised when a file could not be placed, even after the fallback."""

    def __init__(self, source: Path, destination: Path, cause: str) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        super().__init__(
            f"Failed to place {source} -> {destination}: {cause}"
        )


class ReportWriteError(DicomSortError):
    """Raised when the metadata report cannot be written."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Failed to write report: {path}")
