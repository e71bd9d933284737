"""
Engines drive the remote resources towards the expected states:
they poll the API until the resources converge, and resolve the versions.

Engines do not mutate the remote resources themselves; the mutations
are the callers' business. Engines only observe the aftermath.
"""
