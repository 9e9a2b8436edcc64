"""
Engine — argument binding, action resolution, conflict resolution and
dependency-ordered invocation.
"""
