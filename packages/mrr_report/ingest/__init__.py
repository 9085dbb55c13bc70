"""Loading raw MRR delta records from CSV exports."""

from .utils import load_delta_rows, read_delta_rows

__all__ = ["load_delta_rows", "read_delta_rows"]
