def test_import_package():
    import hello3d_mcp  # noqa: F401
    import hello3d_mcp.server  # noqa: F401


def test_error_codes_are_stable():
    from hello3d_mcp.shared.errors import NoRoute, QueryTimeout, TransportLost

    assert NoRoute("x").code == "no_route"
    assert QueryTimeout("x").code == "timeout"
    lost = TransportLost("Browser disconnected")
    assert lost.code == "transport_lost"
    assert lost.message == "Browser disconnected"


def test_low_level_mcp_server_api_is_available():
    from importlib.metadata import version

    from mcp.server import Server

    assert version("mcp").split(".")[0] == "1"
    assert callable(Server.list_tools)
    assert callable(Server.call_tool)
