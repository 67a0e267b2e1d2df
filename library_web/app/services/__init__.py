"""
Service layer.

Each service encapsulates the business logic of one domain and runs
every operation inside its own unit of work (see ``core.db``).
"""
