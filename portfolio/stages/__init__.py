"""Record stages: merge, ordering, curation, validation scan.

Each stage exposes a small, pure function API over in-memory records; the
orchestrator wires them together from the run configuration.
"""
