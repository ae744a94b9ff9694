"""
Core facade logic.

Nothing in this package imports boto3 or reads the environment. The facade
only knows about the credentials provider and client factory protocols.
"""
