"""WD Bridge (wdbridge) - Shell and transfer engine for WD cloud storage devices."""

from wdbridge.core.client import WDClient
from wdbridge.core.auth import WDAuth
from wdbridge.core.errors import WDBridgeError, AuthenticationError, RetryExhaustedError
from wdbridge.core.path_stack import PathStack
from wdbridge.services.upload import WDUploader
from wdbridge.services.download import WDDownloader
from wdbridge.core.stats import OperationStats

__version__ = "0.1.0"
__all__ = [
    "WDClient",
    "WDAuth",
    "WDBridgeError",
    "AuthenticationError",
    "RetryExhaustedError",
    "PathStack",
    "WDUploader",
    "WDDownloader",
    "OperationStats",
]
