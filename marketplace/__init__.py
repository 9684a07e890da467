"""Multi-vendor marketplace REST backend."""
