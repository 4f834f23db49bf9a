"""MCP server and SQLite storage for formfill profiles."""
