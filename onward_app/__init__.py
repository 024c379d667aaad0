# onward_app/__init__.py

from onward_app.core.profile import GrowthStage, ProfileRecord
from onward_app.core.progress_service import ProgressService

__version__ = "1.0.0"

__all__ = ["GrowthStage", "ProfileRecord", "ProgressService", "__version__"]
