"""Boundary adapters: record store, blob store, embeddings, text extraction."""
