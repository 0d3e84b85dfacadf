"""HTTP API for the staffing payroll engine."""
