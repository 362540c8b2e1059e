"""HTTP API for the payroll audit engine."""
