"""Repositories layer for insightflow."""
from .workbook_repository import WorkbookRepository, WorkbookInfo

__all__ = ["WorkbookRepository", "WorkbookInfo"]
