"""Payroll audit: rules-driven net pay and payroll anomaly detection."""

__version__ = "1.0.0"
