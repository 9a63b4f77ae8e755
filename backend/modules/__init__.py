"""
Feature modules for the Defy backend.

- auth: process session, credential rules, Supabase identity provider
- profiles: per-user profile documents and reading progress
- catalog: read-only topics, publications and articles

A module exposes Protocols in interfaces.py; other modules and the API
layer depend on those, and the service container supplies the concrete
implementations.
"""
