from accounts_core.config import CoreConfig, load_core_config
from accounts_core.home import AccountsPaths, ensure_accounts_layout, resolve_accounts_home

__version__ = "0.1.0"

__all__ = [
    "AccountsPaths",
    "CoreConfig",
    "__version__",
    "ensure_accounts_layout",
    "load_core_config",
    "resolve_accounts_home",
]
