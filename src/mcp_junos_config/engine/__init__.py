"""Resource Engine - apply Junos resource configurations to devices."""
from .engine import ResourceEngine
from .schema import Operation, OperationResult, ResourceError

__all__ = [
    "ResourceEngine",
    "Operation",
    "OperationResult",
    "ResourceError",
]
