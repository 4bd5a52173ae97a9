"""NPM registry package: packument models, name handling and the cached client."""

from .client import PackumentFetcher, get_default_cache
from .models import Packument, PackumentVersion
from .names import encode_package_name, validate_package_name

__all__ = [
    "PackumentFetcher",
    "get_default_cache",
    "Packument",
    "PackumentVersion",
    "encode_package_name",
    "validate_package_name",
]
