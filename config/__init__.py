"""Configuration helpers for the production dashboard."""

# This package collects runtime configuration assets that can be customised
# without touching the pipeline logic (for example the field-name candidates
# used to read the upstream production export).
