"""
Transaction manager interface.

Multi-step service operations run inside ``transaction()`` so that either
every write commits or none does.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager


class ITransactionManager(ABC):
    """Provides all-or-nothing scopes spanning several repository calls."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[Any]:
        """Open a transaction scope. Nested scopes join the outer one."""
        pass
