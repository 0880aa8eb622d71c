"""
Kindling Utilities
------------------

- smart_text: HTML prose -> formatted paragraphs, typography, plain text
- fs: filename sanitization, atomic writes, unique paths
- md: frontmatter and line-level Markdown helpers
"""
