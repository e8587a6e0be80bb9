"""JSON-RPC client for geth and parity Ethereum nodes, with typed block, receipt and trace records."""

__version__ = "0.1.0"