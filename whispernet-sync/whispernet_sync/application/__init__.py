"""
Application layer - sync hub, location resolution and lifecycle
"""
