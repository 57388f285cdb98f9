"""External service integrations used by API routes (payments, file storage)."""
