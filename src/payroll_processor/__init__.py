"""Multi-tenant payroll computation and run processing."""

__version__ = "0.1.0"
