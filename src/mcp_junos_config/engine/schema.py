"""Result and error types for the Resource Engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Operation(str, Enum):
    """Kind of resource operation."""
    RENDER = "render"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"


class ResourceError(Exception):
    """Resource lifecycle failure (already exists, missing after commit, ...)."""


@dataclass
class OperationResult:
    """Result of one resource operation."""
    operation: Operation
    resource_type: str
    resource_id: str
    success: bool = False
    dry_run: bool = False
    lines: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    state: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.state is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "operation": self.operation.value,
            "resource_type": self.resource_type,
            "id": self.resource_id,
            "dry_run": self.dry_run,
            "lines": self.lines,
            "warnings": self.warnings,
            "state": self.state,
            "error": self.error,
        }
