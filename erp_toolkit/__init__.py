"""erp-toolkit: rate guide import/export and section-aware PDF export for the ERP back office."""

__version__ = "0.1.0"
