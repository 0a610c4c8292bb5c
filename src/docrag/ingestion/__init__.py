"""
Ingestion — upload validation, paragraph chunking, and embedding.

Converts an uploaded text file into an ordered list of chunks and a
parallel list of embedding vectors, ready to be committed to a
vector index by the session layer.
"""
