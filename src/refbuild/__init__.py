"""refbuild: find reference builds for CI analysis results.

Walks backward from a baseline build to locate earlier analysis results
that qualify for trend and diff comparisons.
"""

__version__ = "0.1.0"
