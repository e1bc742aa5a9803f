from .cash_sessions import (
    CashSession,
    CashSessionDetail,
    SESSION_OPEN,
    SESSION_CLOSED,
    DETAIL_START,
    DETAIL_END,
    SINGLE_OPEN_INDEX,
)

__all__ = [
    'CashSession', 'CashSessionDetail',
    'SESSION_OPEN', 'SESSION_CLOSED', 'DETAIL_START', 'DETAIL_END',
    'SINGLE_OPEN_INDEX',
]
