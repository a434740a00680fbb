"""Cross-context building blocks: configuration, errors, logging and the relational store."""
