"""Test suite for schemaform.

This package contains tests for:
- Value codec (emptiness, loose equality, number and date coercion)
- Validation rules and field-level validation
- Option model and schema parsing/serialization
- Form value controller (hydration, mutations, notifications)
- Change notifier and structured validation results
"""
