"""MCP server entrypoint."""

import logging

from fastmcp import FastMCP

from kubectl_param_tool import config
from kubectl_param_tool.tools import register_query_param_tools

logger = logging.getLogger("mcp-server")


def create_server(name: str = "kubectl-param-tool", non_destructive: bool = True) -> FastMCP:
    server = FastMCP(name=name)
    register_query_param_tools(server, non_destructive)
    return server


def main():
    logging.basicConfig(
        level=config.get_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting kubectl-param-tool MCP server")
    create_server().run()


if __name__ == "__main__":
    main()
