"""
Ingestion — fetching, page extraction, chunking, and embedding.

This module is responsible for turning a stored PDF into embedded
segments: blob fetch → page records → bounded text segments → vectors
keyed by a content hash.
"""
