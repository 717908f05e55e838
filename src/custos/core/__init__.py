"""Core building blocks: configuration, contract constants, types, errors."""
