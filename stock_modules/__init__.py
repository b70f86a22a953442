"""
Stock Modules.

Thin orchestration layers over the Stock Kernel.  Each module contains:
- Domain models (the nouns, as frozen DTOs)
- Workflows (state machines)
- A service that owns its transaction boundary

Modules:
- Ordering: shop request submission, deliveries, cancellation
"""

from stock_modules import ordering

__all__ = ["ordering"]
