"""Tests for the MCP server tools."""

import asyncio

from mcp.server.fastmcp import FastMCP

from rlmdoc.server import create_mcp_server
from rlmdoc.storage import SessionStore


class TestMcpServer:
    """Test tool registration and session side effects."""

    def test_tools_registered(self, tmp_path):
        """Test that every session tool is exposed."""
        mcp = create_mcp_server(SessionStore(tmp_path))
        assert isinstance(mcp, FastMCP)

        names = {tool.name for tool in asyncio.run(mcp.list_tools())}
        assert names == {
            "load",
            "chunk",
            "next_chunk",
            "skip",
            "jump",
            "store_result",
            "aggregate",
            "info",
            "clear",
        }

    def test_tools_share_session_file(self, tmp_path):
        """Test that tool calls persist to the bound session."""
        store = SessionStore(tmp_path)
        doc = tmp_path / "doc.md"
        doc.write_text("# A\nfoo\n# B\nbar\n", encoding="utf-8")
        mcp = create_mcp_server(store, "agent")

        asyncio.run(mcp.call_tool("load", {"source": str(doc)}))
        asyncio.run(mcp.call_tool("chunk", {"strategy": "semantic"}))
        asyncio.run(mcp.call_tool("store_result", {"key": "chunk_0", "value": "found"}))

        session = store.load("agent")
        assert session.chunk_count == 2
        assert session.results == {"chunk_0": "found"}
        assert store.load().results == {}

    def test_errors_do_not_save(self, tmp_path):
        """Test that a failing tool leaves the session file alone."""
        store = SessionStore(tmp_path)
        mcp = create_mcp_server(store)

        asyncio.run(mcp.call_tool("next_chunk", {}))

        assert not store.path_for().exists()

    def test_chunk_max_size(self, tmp_path):
        """Test that the chunk tool passes the section size limit through."""
        store = SessionStore(tmp_path)
        doc = tmp_path / "doc.md"
        doc.write_text("# A\none\n\ntwo\n\nthree\n", encoding="utf-8")
        mcp = create_mcp_server(store)

        asyncio.run(mcp.call_tool("load", {"source": str(doc)}))
        asyncio.run(mcp.call_tool("chunk", {"strategy": "semantic", "max_size": 10}))

        session = store.load()
        assert session.chunk_count == 3
        assert session.chunk_buffer[0].metadata["sectionHeader"] == "A (Part 1)"
