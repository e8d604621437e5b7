"""Session reconstruction and hours accounting for intern daily time records."""

from internhours.utils.session_utils import build_sessions
from internhours.utils.statistics_utils import compute_progress, compute_time_statistics

__all__ = [
    'build_sessions',
    'compute_progress',
    'compute_time_statistics',
]
