"""Services package: expose all concrete services from one import."""
from .analytics import ANALYTICS_PERIODS, ServiceTotal, Totals
from .data_store import ChangeEvent, DataStore
from .status_workflow import CANONICAL_STATUSES, StatusOrder

__all__ = [
    'ANALYTICS_PERIODS',
    'CANONICAL_STATUSES',
    'ChangeEvent',
    'DataStore',
    'ServiceTotal',
    'StatusOrder',
    'Totals',
]
