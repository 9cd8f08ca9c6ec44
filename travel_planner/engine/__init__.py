"""Tool execution engine for the travel planner."""
