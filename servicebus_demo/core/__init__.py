"""Core building blocks: configuration, logging, exceptions and interfaces."""
