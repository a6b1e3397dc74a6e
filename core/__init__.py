# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - merge: Id-keyed card merge
# - storage: Pluggable document stores (local file, remote table)
