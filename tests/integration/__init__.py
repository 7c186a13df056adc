"""
Integration tests.

Exercise the sender, receiver and application together against an
in-memory namespace. No Azure Service Bus namespace is required.
"""
