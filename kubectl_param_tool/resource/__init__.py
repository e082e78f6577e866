"""Resource identifiers, CRD discovery and query parameter verification."""
