"""SchemaForge: entity-relationship schema engine.

Tables, columns and relationships are edited as immutable snapshots, resolved into
parent/child foreign keys, validated, compiled to SQL DDL and laid out on a canvas.
"""

__version__ = "0.1.0"
