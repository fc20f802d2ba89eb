"""
Service layer: calculations, selection, parsing, aggregation and plotting.
"""
