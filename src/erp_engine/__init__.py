"""ERP core: double-entry journal posting and payroll calculation."""

__version__ = "0.1.0"
