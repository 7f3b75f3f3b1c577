from .loader import DEFAULT_CONFIG_TEMPLATE, load_config, load_policy
from .models import PolicyConfig, RolegateConfig

__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "PolicyConfig",
    "RolegateConfig",
    "load_config",
    "load_policy",
]
