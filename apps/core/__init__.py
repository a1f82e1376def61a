"""
Core app - Shared abstractions and utilities.

This app provides platform-agnostic building blocks for the other apps:
- The service result contract (ServiceResult, ErrorKind, service_boundary)
- Identifier and timestamp helpers for the service boundary
- The revalidation hook (tag-versioned cache invalidation)
- Background task execution (TaskService)

Task execution can be switched between:
- Local development (sync execution)
- AWS Lambda + SQS (production)
- Celery + Redis (fallback)
"""
