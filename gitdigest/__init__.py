"""
Git repository digest generator.

Clones a remote Git repository into an ephemeral workspace, filters its
files, and flattens the survivors into a single text, JSON or Markdown
digest suitable for a language-model prompt.
"""

__version__ = "1.0.0"
__author__ = "gitdigest"
