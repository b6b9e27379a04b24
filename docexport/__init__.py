"""Document export engine: rich-document tree to .docx, rendered surface to paged .pdf."""
