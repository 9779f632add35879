# TICKWISE - Shared Libraries
"""
Shared core libraries for the TICKWISE trading engine.

Modules:
    tickwise_core: Constants, exceptions, market models, trigger state
        machine and paper trading ledger
"""

__version__ = "1.0.0"
