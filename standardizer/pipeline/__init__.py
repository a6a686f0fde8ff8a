"""Import pipeline: header mapping, role matching and row normalization for tables."""

from .exceptions import ImportFileError, ImportPipelineError
from .importer import ImportPipeline, read_csv_file
from .models import ImportRunResult

__all__ = [
    "ImportPipeline",
    "ImportRunResult",
    "read_csv_file",
    "ImportPipelineError",
    "ImportFileError",
]
