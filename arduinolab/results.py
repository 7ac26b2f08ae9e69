from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'
    VALIDATION_FAILED = 'validation_failed'
    STORAGE_WRITE_FAILED = 'storage_write_failed'
    ROLLED_BACK = 'rolled_back'


# HTTP status used by the routes for each failure kind
STATUS_CODES = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.STORAGE_WRITE_FAILED: 500,
    ErrorKind.ROLLED_BACK: 500,
}


@dataclass
class ActionResult:
    """Outcome of a write action.

    ``success`` and ``error_kind`` are the control-flow signals; ``message``
    is for display only.
    """
    success: bool
    message: str = ''
    error_kind: Optional[ErrorKind] = None
    project_id: Optional[str] = None
    rows_matched: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message='', **kwargs) -> 'ActionResult':
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, **kwargs) -> 'ActionResult':
        return cls(success=False, message=message, error_kind=kind, **kwargs)

    @property
    def status_code(self) -> int:
        return 200 if self.success else STATUS_CODES[self.error_kind]

    def to_dict(self) -> Dict[str, Any]:
        payload = {'success': self.success, 'message': self.message}
        if self.error_kind is not None:
            payload['error_kind'] = self.error_kind.value
        if self.project_id is not None:
            payload['project_id'] = self.project_id
        if self.rows_matched is not None:
            payload['rows_matched'] = self.rows_matched
        payload.update(self.data)
        return payload
