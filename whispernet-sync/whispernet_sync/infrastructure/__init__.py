"""
Infrastructure layer - HTTP and key-value backends
"""
