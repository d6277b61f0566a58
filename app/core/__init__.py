"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps (no domain logic here).

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - VersionedMixin: Optimistic locking version column

Services (import from core.services):
    - BaseService: Base class for service layer (logger, atomic, validation)

Exceptions (import from core.exceptions):
    - BaseApplicationError and the ValidationError / NotFoundError /
      PermissionDeniedError / ConflictError / ConcurrencyConflictError /
      ExternalServiceError family, each with an HTTP status

Locks (import from core.locks):
    - DistributedLock: Redis lock with TTL
    - lock_for_update: Fail-fast row lock

Decorators (import from core.decorators):
    - retry_on_conflict: Retry once after losing a race

API helpers:
    - core.pagination: page/limit and limit/offset pagination
    - core.exception_handler: Maps application errors to HTTP responses
"""
