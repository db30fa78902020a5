# lingua_sync/__init__.py
"""lingua-sync: 以内容键为身份，在本地字符串存储与远端翻译服务之间同步译文。

该模块导出同步协调器、配置以及持久化层的工厂函数。
"""

__version__ = "0.1.0"

from .client import LinguaClient
from .config import LinguaSyncConfig
from .coordinator import SyncOptions, SyncOrchestrator, meets_threshold
from .persistence import create_store
from .pull import PullFetcher
from .push import PushDispatcher, PushOptions
from .transport import create_transport
from .core.types import TranslationStatus

__all__ = [
    "__version__",
    "LinguaClient",
    "LinguaSyncConfig",
    "PullFetcher",
    "PushDispatcher",
    "PushOptions",
    "SyncOptions",
    "SyncOrchestrator",
    "TranslationStatus",
    "create_store",
    "create_transport",
    "meets_threshold",
]
