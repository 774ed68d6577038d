from .filesystem_config_provider import DEFAULT_API_BASE_URL, FileSystemConfigProvider

__all__ = ["FileSystemConfigProvider", "DEFAULT_API_BASE_URL"]
