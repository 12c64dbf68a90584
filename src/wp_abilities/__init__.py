"""WordPress abilities exposed as Model Context Protocol tools."""
