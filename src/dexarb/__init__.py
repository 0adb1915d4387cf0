"""
Solana DEX Arbitrage Scanner.

Asynchronous service that compares token prices across trading venues
and reports cross-venue arbitrage opportunities for a dashboard.
"""

__version__ = "1.0.0"
