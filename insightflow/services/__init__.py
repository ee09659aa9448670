"""Services layer for insightflow."""
from .insight_service import InsightService, StreamEvent, build_dataset_structure
from .health_service import HealthService, HealthReport, ServiceHealth

__all__ = ["InsightService", "StreamEvent", "build_dataset_structure", "HealthService", "HealthReport", "ServiceHealth"]
