from contextvars import ContextVar

# (unit of work, stores bound to its open transaction)
TRANSACTION: ContextVar[tuple | None] = ContextVar("transaction", default=None)
