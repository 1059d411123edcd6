"""SQL tooling: the auto-correction engine and the pretty-printer."""
