"""Pure statistics for habit anchors."""
