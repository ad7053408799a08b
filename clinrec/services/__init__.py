"""Services that talk to the clinical records backend."""
