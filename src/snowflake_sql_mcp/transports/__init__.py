# Snowflake SQL MCP Server
# File: transports/__init__.py
# Version: v1

"""Entry points for the stdio and HTTP transports."""
