"""
Configuration module.

Default parameters, YAML loading with override precedence, and validation
of the merged engine configuration.
"""
