"""Abstract lookup adapter and its error types."""

from searchbattle.adapters.base.adapter import AdapterHealth, LookupAdapter, RawResults
from searchbattle.adapters.base.exceptions import AdapterError, BackendError, ConfigurationError

__all__ = ["AdapterError", "AdapterHealth", "BackendError", "ConfigurationError", "LookupAdapter", "RawResults"]
