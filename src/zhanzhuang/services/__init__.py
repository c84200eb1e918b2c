"""Service layer: configuration, remote text generation, session orchestration."""
