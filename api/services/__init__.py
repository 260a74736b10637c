"""Service layer.

Layer hierarchy:
    Routes (HTTP) -> Services -> Repositories (Database)

Services should:
- Receive their repositories at construction
- Return ORM models; routes convert them to Pydantic schemas

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
