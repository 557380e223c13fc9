"""nodestore: REST CRUD over a JSONB document store with query-string filtering."""
