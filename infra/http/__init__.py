from .rest_api_client import UrllibApiClient, encode_multipart

__all__ = ["UrllibApiClient", "encode_multipart"]
