"""Multi-source company data fusion and comparison."""

__version__ = "0.1.0"
