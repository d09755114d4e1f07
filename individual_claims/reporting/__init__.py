"""Report generation for the claim development analysis."""

from .report_builder import ClaimReportBuilder, environment_info
from .table_generator import TableGenerator

__all__ = ["ClaimReportBuilder", "TableGenerator", "environment_info"]
