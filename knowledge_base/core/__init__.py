"""Core domain logic: chunking, versioning, ingestion, retrieval, history."""
