"""Core building blocks: config, errors, logging, types, executor and cache."""
