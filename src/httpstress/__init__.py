__version__ = "0.1.0"

__all__ = [
    "RequestDispatcher",
    "RequestExecutor",
    "ResultAggregator",
    "StressConfig",
    "RequestSpec",
    "Outcome",
    "RunSummary",
    "render_report",
    "render_latency_histogram",
]


from .core import RequestDispatcher
from .executor import RequestExecutor
from .aggregator import ResultAggregator
from .config import StressConfig
from .models import RequestSpec, Outcome, RunSummary
from .rendering import render_report, render_latency_histogram
