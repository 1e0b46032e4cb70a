"""Business rules for the four entity families.

Each module is a set of async functions taking the request's AsyncSession:

    Routes (HTTP) -> services (rules) -> repositories (queries)

A service checks uniqueness and existence, raises the errors in
services.exceptions, and hands back Pydantic response schemas. Families
never call into each other; an employee's department_id or an order
line's product_id is stored as given.
"""
