"""Services Layer — rule set loading and the async decision pipeline.

Invariants:
    - Services orchestrate IO (repositories, cache) around pure core calls
    - Collaborators are injected through constructors, never module globals
"""
