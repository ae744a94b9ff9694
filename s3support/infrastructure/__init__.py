"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- credentials: Where access keys come from (static, env, properties file, boto3 chain)
- storage: Object store clients (boto3, in-memory) and client factories

These wrappers translate between external formats and our domain models.
"""
