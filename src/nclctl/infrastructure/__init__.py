"""Infrastructure layer: the constraint-graph engine, compiler, and loader."""
