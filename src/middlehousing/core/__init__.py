"""Shared configuration, logging and types."""
