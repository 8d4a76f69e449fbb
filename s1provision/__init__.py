"""SentinelOne account and user provisioning toolkit."""

__version__ = "0.3.0"
__title__ = "SentinelOne Provisioning Client"
__command__ = "s1provision"

__all__ = ["__version__", "__title__", "__command__"]
