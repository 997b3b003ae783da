"""Legal request triage API."""
