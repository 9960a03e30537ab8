"""
Persistence package for Jokes Service.

Reads the jokes relation from PostgreSQL through an asyncpg pool.
"""
