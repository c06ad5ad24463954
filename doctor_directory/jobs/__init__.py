"""Background jobs for the doctor directory."""
