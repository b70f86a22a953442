"""
Stock Kernel - field distribution ledger

An event-sourced, append-only stock ledger with:
- Immutable directional stock movements
- Balances derived at query time, never stored
- Daily-reset windows for representative-carried stock
- Fulfillment matching of pending shop orders against carried stock
"""

__version__ = "0.1.0"
