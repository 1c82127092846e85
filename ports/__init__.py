from .analysis import AnalysisServicePort
from .page_source import PageSourcePort
from .storage import BackingStorePort

__all__ = [
    "AnalysisServicePort",
    "PageSourcePort",
    "BackingStorePort",
]
