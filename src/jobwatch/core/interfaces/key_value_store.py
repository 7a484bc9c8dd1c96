"""KeyValueStorePort: hexagonal port for the durable client-side cache.

Values are opaque strings; serialization is the caller's concern. Adapters
raise PersistenceError on I/O failure and return None for absent keys.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorePort(ABC):
	"""Port abstraction for a string key-value store."""

	@abstractmethod
	def get(self, key: str) -> Optional[str]:
		"""Return the stored value or None if the key is absent."""
		raise NotImplementedError

	@abstractmethod
	def set(self, key: str, value: str) -> None:
		"""Store value under key, overwriting any previous value."""
		raise NotImplementedError

	@abstractmethod
	def delete(self, key: str) -> None:
		"""Remove key; absent keys are ignored."""
		raise NotImplementedError
